"""リクエスト主体の解決."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..entities import GuestSession
from ..identifiers import GuestToken
from ..ports import InvalidCredentialError, TokenValidator
from ..value_objects import Identity, RoutePolicy, SessionMetadata

from .credential_extractor import RequestFields, extract_credential, extract_guest_token
from .guest_session_store import GuestSessionStore


class UnauthenticatedError(Exception):
    """認証が必要なルートで主体を解決できなかったエラー."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class SessionExpiredError(UnauthenticatedError):
    """提示されたゲストセッションが期限切れだったエラー."""

    def __init__(self, message: str = "Guest session expired") -> None:
        super().__init__(message)


class ForbiddenError(Exception):
    """主体のロールが許可されていないエラー."""

    def __init__(self, allowed_roles: frozenset[str], role: str | None = None) -> None:
        self.allowed_roles = allowed_roles
        self.role = role
        super().__init__(f"Access denied. Requires one of: {', '.join(sorted(allowed_roles))}")


@dataclass(frozen=True)
class ResolvedRequest:
    """主体解決の結果."""

    identity: Identity
    guest_session: GuestSession | None = None
    provisioned: bool = False


class IdentityResolver:
    """リクエストごとにちょうど1つの主体を決定する.

    解決順序:
        1. 決められた場所の並びからベアラー資格情報を取り出す
        2. 既知のプレフィックスを除去する
        3. 資格情報があれば検証し、成功ならユーザーとする（失敗時は次へ）
        4. ゲスト許可ルートなら有効なゲストセッションを探す
        5. 認証不要のゲスト許可ルートならゲストセッションを自動発行する
        6. 未解決なら認証必須ルートは拒否、それ以外は匿名とする
        7. ロール制限を検査する
    """

    def __init__(
        self,
        token_validator: TokenValidator,
        guest_session_store: GuestSessionStore,
        logger: logging.Logger | None = None,
    ) -> None:
        """初期化.

        Args:
            token_validator: 資格情報検証
            guest_session_store: ゲストセッションストア
            logger: ロガー
        """
        self._token_validator = token_validator
        self._guest_session_store = guest_session_store
        self._logger = logger or logging.getLogger(__name__)

    def resolve(
        self,
        fields: RequestFields,
        policy: RoutePolicy,
        metadata: SessionMetadata | None = None,
    ) -> ResolvedRequest:
        """主体を解決する.

        Args:
            fields: リクエストの生の値
            policy: ルートの認証ポリシー
            metadata: ゲストセッション自動発行時に記録するメタデータ

        Returns:
            解決結果

        Raises:
            UnauthenticatedError: 認証必須ルートで主体を解決できない場合
            ForbiddenError: ロールが許可されていない場合
        """
        resolved = self._resolve_user(fields)
        saw_expired_session = False

        if resolved is None and policy.allow_guest:
            resolved, saw_expired_session = self._resolve_guest(fields)

        if resolved is None and policy.auto_provisions_guest():
            session = self._guest_session_store.create(metadata)
            resolved = ResolvedRequest(
                identity=Identity.guest(session.token),
                guest_session=session,
                provisioned=True,
            )

        if resolved is None:
            if policy.require_auth:
                if saw_expired_session:
                    raise SessionExpiredError()
                raise UnauthenticatedError()
            resolved = ResolvedRequest(identity=Identity.anonymous())

        identity = resolved.identity
        if not identity.satisfies_roles(policy.allowed_roles):
            self._logger.info(
                "Role check failed: kind=%s role=%s allowed=%s",
                identity.kind.value,
                identity.role,
                sorted(policy.allowed_roles),
            )
            raise ForbiddenError(policy.allowed_roles, identity.role)

        self._logger.debug("Identity resolved: kind=%s id=%s", identity.kind.value, _mask(identity.id))
        return resolved

    def _resolve_user(self, fields: RequestFields) -> ResolvedRequest | None:
        credential = extract_credential(fields)
        if credential is None:
            return None
        try:
            claims = self._token_validator.verify(credential)
        except InvalidCredentialError as e:
            # ゲスト・匿名として扱える可能性があるのでここでは失敗させない
            self._logger.warning("Credential rejected: %s", e)
            return None
        identity = Identity.user(claims.user_id, claims.role, claims.expires_at)
        return ResolvedRequest(identity=identity)

    def _resolve_guest(self, fields: RequestFields) -> tuple[ResolvedRequest | None, bool]:
        raw_token = extract_guest_token(fields)
        if raw_token is None:
            return None, False
        try:
            token = GuestToken(raw_token)
        except ValueError:
            self._logger.info("Malformed guest token ignored")
            return None, False

        session = self._guest_session_store.find_by_token(token)
        if session is None:
            self._logger.info("Guest session not found: %s", token.masked())
            return None, False
        if self._guest_session_store.is_expired(session):
            # 清掃ジョブの実行前でも期限切れセッションは再利用しない
            self._logger.info("Expired guest session rejected: %s", token.masked())
            return None, True

        self._guest_session_store.touch(session)
        return ResolvedRequest(identity=Identity.guest(session.token), guest_session=session), False


def _mask(value: str) -> str:
    return value if len(value) <= 8 else f"{value[:8]}..."
