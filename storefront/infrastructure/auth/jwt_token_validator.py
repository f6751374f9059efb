"""JWTによる資格情報検証."""
from datetime import datetime, timezone
from typing import Any

import jwt

from storefront.domain.ports import InvalidCredentialError, TokenValidator
from storefront.domain.value_objects import Claims

DEFAULT_ALGORITHM = "HS256"


class JwtTokenValidator(TokenValidator):
    """共有シークレットで署名されたJWTを検証する.

    exp クレームは必須。ユーザーIDは id クレーム、なければ sub クレームから取る。
    """

    def __init__(self, secret: str, algorithm: str = DEFAULT_ALGORITHM, leeway: int = 0) -> None:
        """初期化.

        Args:
            secret: 署名検証用のシークレット
            algorithm: 署名アルゴリズム
            leeway: 有効期限判定の猶予秒数
        """
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._leeway = leeway

    def verify(self, credential: str) -> Claims:
        """資格情報を検証してクレームを返す."""
        try:
            payload: dict[str, Any] = jwt.decode(
                credential,
                self._secret,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options={"require": ["exp"]},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidCredentialError(str(e)) from e

        user_id = payload.get("id") or payload.get("sub")
        if not user_id:
            raise InvalidCredentialError("Token has no user id claim")

        return Claims(
            user_id=str(user_id),
            role=str(payload.get("role") or ""),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            raw=payload,
        )

    def issue(self, user_id: str, role: str, expires_at: datetime, **extra: Any) -> str:
        """署名済みトークンを発行する（ローカル実行・テスト用）."""
        payload = {"id": user_id, "role": role, "exp": expires_at, **extra}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)
