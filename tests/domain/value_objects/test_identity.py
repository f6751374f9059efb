"""Identityのテスト."""
import pytest

from storefront.domain.enums import IdentityKind
from storefront.domain.identifiers import GuestToken, OwnerKey
from storefront.domain.value_objects import ANONYMOUS_ID, GUEST_ROLE, Identity


class TestIdentity:
    """Identityの単体テスト."""

    def test_ユーザー主体の所有者キー(self) -> None:
        identity = Identity.user("u-1", "customer")
        assert identity.kind == IdentityKind.USER
        assert identity.owner_key() == OwnerKey("user:u-1")

    def test_ゲスト主体はguestロール(self) -> None:
        identity = Identity.guest(GuestToken("tok"))
        assert identity.role == GUEST_ROLE
        assert identity.owner_key() == OwnerKey("guest:tok")

    def test_匿名は番兵IDで所有者キーを持たない(self) -> None:
        identity = Identity.anonymous()
        assert identity.id == ANONYMOUS_ID
        assert identity.owner_key() is None

    def test_ユーザーのIDは必須(self) -> None:
        with pytest.raises(ValueError):
            Identity.user("", "customer")

    def test_匿名に番兵以外のIDは不可(self) -> None:
        with pytest.raises(ValueError):
            Identity(IdentityKind.ANONYMOUS, "someone", "anonymous")

    def test_ロール制限なしは誰でも満たす(self) -> None:
        assert Identity.anonymous().satisfies_roles(frozenset()) is True

    def test_匿名はロール制限を満たさない(self) -> None:
        assert Identity.anonymous().satisfies_roles(frozenset({"anonymous"})) is False

    def test_ロールが含まれていれば満たす(self) -> None:
        identity = Identity.user("u-1", "admin")
        assert identity.satisfies_roles(frozenset({"admin", "store"})) is True
        assert identity.satisfies_roles(frozenset({"driver"})) is False
