"""JwtTokenValidatorのテスト."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from storefront.domain.ports import InvalidCredentialError
from storefront.infrastructure.auth import JwtTokenValidator

SECRET = "test-secret"


def _future() -> datetime:
    return datetime.now(timezone.utc) + timedelta(hours=1)


class TestJwtTokenValidator:
    """JwtTokenValidatorの単体テスト."""

    def test_有効なトークンからクレームを取り出す(self) -> None:
        validator = JwtTokenValidator(SECRET)
        token = validator.issue("u-1", "customer", _future())

        claims = validator.verify(token)

        assert claims.user_id == "u-1"
        assert claims.role == "customer"
        assert claims.expires_at is not None
        assert claims.raw["id"] == "u-1"

    def test_idがなければsubを使う(self) -> None:
        token = jwt.encode({"sub": "u-2", "role": "driver", "exp": _future()}, SECRET, algorithm="HS256")
        claims = JwtTokenValidator(SECRET).verify(token)
        assert claims.user_id == "u-2"

    def test_ロールがなければ空文字(self) -> None:
        token = jwt.encode({"id": "u-3", "exp": _future()}, SECRET, algorithm="HS256")
        assert JwtTokenValidator(SECRET).verify(token).role == ""

    def test_期限切れは不正(self) -> None:
        validator = JwtTokenValidator(SECRET)
        token = validator.issue("u-1", "customer", datetime.now(timezone.utc) - timedelta(seconds=5))
        with pytest.raises(InvalidCredentialError):
            validator.verify(token)

    def test_署名不一致は不正(self) -> None:
        token = JwtTokenValidator("other-secret").issue("u-1", "customer", _future())
        with pytest.raises(InvalidCredentialError):
            JwtTokenValidator(SECRET).verify(token)

    def test_expがなければ不正(self) -> None:
        token = jwt.encode({"id": "u-1"}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidCredentialError):
            JwtTokenValidator(SECRET).verify(token)

    def test_ユーザーIDがなければ不正(self) -> None:
        token = jwt.encode({"role": "admin", "exp": _future()}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidCredentialError):
            JwtTokenValidator(SECRET).verify(token)

    def test_形式不正(self) -> None:
        with pytest.raises(InvalidCredentialError):
            JwtTokenValidator(SECRET).verify("not-a-jwt")

    def test_シークレットは必須(self) -> None:
        with pytest.raises(ValueError):
            JwtTokenValidator("")
