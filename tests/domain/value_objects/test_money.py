"""Moneyのテスト."""
import pytest

from storefront.domain.value_objects import Money


class TestMoney:
    """Moneyの単体テスト."""

    def test_加算と乗算(self) -> None:
        assert Money.of(100).add(Money.of(50)) == Money(150)
        assert Money.of(120).multiply(3) == Money(360)

    @pytest.mark.parametrize("value", [-1, 1.5, True])
    def test_不正な値はエラー(self, value) -> None:
        with pytest.raises(ValueError):
            Money(value)
