"""設定読み込みのテスト."""
from datetime import timedelta

import pytest

from storefront.config import DEFAULT_JWT_SECRET, Settings


class TestSettingsFromEnv:
    """Settings.from_envのテスト."""

    def test_未設定ならデフォルト値(self) -> None:
        settings = Settings.from_env({})

        assert settings.jwt_secret == DEFAULT_JWT_SECRET
        assert settings.guest_session_ttl == timedelta(hours=24)
        assert settings.cleanup_interval == timedelta(hours=1)
        assert settings.session_cleanup_batch_size == 2000
        assert settings.orphan_cart_max_age == timedelta(hours=24)
        assert settings.stale_migration_max_age is None
        assert settings.cart_max_line_quantity == 99
        assert settings.use_dynamodb is False
        assert settings.log_level == "INFO"

    def test_環境変数を読み込む(self) -> None:
        settings = Settings.from_env(
            {
                "JWT_SECRET": "s3cret",
                "GUEST_SESSION_EXPIRATION_HOURS": "2",
                "SESSION_CLEANUP_INTERVAL_HOURS": "0.5",
                "SESSION_CLEANUP_BATCH_SIZE": "100",
                "STALE_MIGRATION_MAX_AGE_HOURS": "3",
                "CART_TABLE_NAME": "carts",
                "GUEST_SESSION_TABLE_NAME": "sessions",
                "LOG_LEVEL": "debug",
            }
        )

        assert settings.jwt_secret == "s3cret"
        assert settings.guest_session_ttl == timedelta(hours=2)
        assert settings.cleanup_interval == timedelta(minutes=30)
        assert settings.session_cleanup_batch_size == 100
        assert settings.stale_migration_max_age == timedelta(hours=3)
        assert settings.use_dynamodb is True
        assert settings.guest_session_table_name == "sessions"
        assert settings.log_level == "DEBUG"

    def test_積極的な清掃では孤立カートの期間が短い(self) -> None:
        settings = Settings.from_env({"AGGRESSIVE_SESSION_CLEANUP": "true"})
        assert settings.aggressive_session_cleanup is True
        assert settings.orphan_cart_max_age == timedelta(hours=6)

    def test_明示した孤立カート期間が優先される(self) -> None:
        settings = Settings.from_env(
            {"AGGRESSIVE_SESSION_CLEANUP": "1", "ORPHAN_CART_MAX_AGE_HOURS": "12"}
        )
        assert settings.orphan_cart_max_age == timedelta(hours=12)

    def test_空文字はデフォルト扱い(self) -> None:
        settings = Settings.from_env({"SESSION_CLEANUP_BATCH_SIZE": " ", "CART_TABLE_NAME": ""})
        assert settings.session_cleanup_batch_size == 2000
        assert settings.use_dynamodb is False

    def test_数値でなければエラー(self) -> None:
        with pytest.raises(ValueError, match="GUEST_SESSION_EXPIRATION_HOURS"):
            Settings.from_env({"GUEST_SESSION_EXPIRATION_HOURS": "a day"})

    @pytest.mark.parametrize(
        "name",
        [
            "GUEST_SESSION_EXPIRATION_HOURS",
            "SESSION_CLEANUP_INTERVAL_HOURS",
            "SESSION_CLEANUP_BATCH_SIZE",
            "CART_MAX_LINE_QUANTITY",
            "CART_MAX_WRITE_ATTEMPTS",
        ],
    )
    def test_正でない値はエラー(self, name: str) -> None:
        with pytest.raises(ValueError, match=name):
            Settings.from_env({name: "0"})
