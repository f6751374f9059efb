"""ログ設定のテスト."""
import logging
from unittest.mock import patch

import pytest

from storefront.logging_config import ROOT_LOGGER_NAME, configure_logging, shutdown_logging


@pytest.fixture(autouse=True)
def cleanup_logging():
    yield
    shutdown_logging()


class TestConfigureLogging:
    """configure_loggingのテスト."""

    def test_パッケージのロガーにレベルを設定する(self) -> None:
        logger = configure_logging("DEBUG")
        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.DEBUG

    def test_複数回呼んでもハンドラーは1つ(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        before = len(logger.handlers)
        configure_logging()
        configure_logging()
        assert len(logger.handlers) == before + 1

    def test_停止するとハンドラーを外す(self) -> None:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        before = len(logger.handlers)
        configure_logging()
        shutdown_logging()
        assert len(logger.handlers) == before

    def test_プロセス終了時の停止処理を一度だけ登録する(self) -> None:
        with patch("storefront.logging_config.atexit") as atexit_mock:
            configure_logging()
            configure_logging()
            shutdown_logging()

        atexit_mock.register.assert_called_once_with(shutdown_logging)
        atexit_mock.unregister.assert_called_once_with(shutdown_logging)
