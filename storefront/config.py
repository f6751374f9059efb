"""環境変数からの設定読み込み."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

# 開発用のデフォルト値。本番では必ず JWT_SECRET を設定すること
DEFAULT_JWT_SECRET = "dev-secret-change-me"

DEFAULT_ORPHAN_CART_MAX_AGE_HOURS = 24
AGGRESSIVE_ORPHAN_CART_MAX_AGE_HOURS = 6


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer: {raw!r}") from e


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number: {raw!r}") from e


def _get_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """プロセス全体の設定."""

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    guest_session_expiration_hours: int = 24
    session_cleanup_interval_hours: float = 1.0
    session_cleanup_batch_size: int = 2000
    aggressive_session_cleanup: bool = False
    orphan_cart_max_age_hours: int = DEFAULT_ORPHAN_CART_MAX_AGE_HOURS
    stale_migration_max_age_hours: int | None = None
    cart_max_line_quantity: int = 99
    cart_max_write_attempts: int = 5
    cart_retry_base_delay_seconds: float = 0.02
    cart_table_name: str | None = None
    guest_session_table_name: str | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """バリデーション."""
        if self.guest_session_expiration_hours <= 0:
            raise ValueError("GUEST_SESSION_EXPIRATION_HOURS must be positive")
        if self.session_cleanup_interval_hours <= 0:
            raise ValueError("SESSION_CLEANUP_INTERVAL_HOURS must be positive")
        if self.session_cleanup_batch_size <= 0:
            raise ValueError("SESSION_CLEANUP_BATCH_SIZE must be positive")
        if self.cart_max_line_quantity <= 0:
            raise ValueError("CART_MAX_LINE_QUANTITY must be positive")
        if self.cart_max_write_attempts <= 0:
            raise ValueError("CART_MAX_WRITE_ATTEMPTS must be positive")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """環境変数から設定を読み込む."""
        env = os.environ if env is None else env
        aggressive = _get_bool(env, "AGGRESSIVE_SESSION_CLEANUP")
        orphan_default = (
            AGGRESSIVE_ORPHAN_CART_MAX_AGE_HOURS if aggressive else DEFAULT_ORPHAN_CART_MAX_AGE_HOURS
        )
        return cls(
            jwt_secret=env.get("JWT_SECRET") or DEFAULT_JWT_SECRET,
            jwt_algorithm=env.get("JWT_ALGORITHM") or "HS256",
            guest_session_expiration_hours=_get_int(env, "GUEST_SESSION_EXPIRATION_HOURS", 24),
            session_cleanup_interval_hours=_get_float(env, "SESSION_CLEANUP_INTERVAL_HOURS", 1.0),
            session_cleanup_batch_size=_get_int(env, "SESSION_CLEANUP_BATCH_SIZE", 2000),
            aggressive_session_cleanup=aggressive,
            orphan_cart_max_age_hours=_get_int(env, "ORPHAN_CART_MAX_AGE_HOURS", orphan_default),
            stale_migration_max_age_hours=_get_int(env, "STALE_MIGRATION_MAX_AGE_HOURS", 0) or None,
            cart_max_line_quantity=_get_int(env, "CART_MAX_LINE_QUANTITY", 99),
            cart_max_write_attempts=_get_int(env, "CART_MAX_WRITE_ATTEMPTS", 5),
            cart_retry_base_delay_seconds=_get_float(env, "CART_RETRY_BASE_DELAY_SECONDS", 0.02),
            cart_table_name=env.get("CART_TABLE_NAME") or None,
            guest_session_table_name=env.get("GUEST_SESSION_TABLE_NAME") or None,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    @property
    def use_dynamodb(self) -> bool:
        """DynamoDB実装を使うか（CART_TABLE_NAME が設定されている場合）."""
        return self.cart_table_name is not None

    @property
    def guest_session_ttl(self) -> timedelta:
        """ゲストセッションの有効期間."""
        return timedelta(hours=self.guest_session_expiration_hours)

    @property
    def cleanup_interval(self) -> timedelta:
        """清掃ジョブの実行間隔."""
        return timedelta(hours=self.session_cleanup_interval_hours)

    @property
    def orphan_cart_max_age(self) -> timedelta:
        """孤立したゲストカートとみなす未更新期間."""
        return timedelta(hours=self.orphan_cart_max_age_hours)

    @property
    def stale_migration_max_age(self) -> timedelta | None:
        """移行中のまま放置されたセッションとみなす期間（Noneは無効）."""
        if self.stale_migration_max_age_hours is None:
            return None
        return timedelta(hours=self.stale_migration_max_age_hours)
