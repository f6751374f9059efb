"""ログ設定."""
import atexit
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "storefront"

_handler: logging.Handler | None = None


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """パッケージのロガーを設定する（複数回呼んでもハンドラーは1つ）.

    プロセス終了時に shutdown_logging が呼ばれるよう登録する。
    """
    global _handler
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
        atexit.register(shutdown_logging)
    return logger


def shutdown_logging() -> None:
    """設定したハンドラーを外してフラッシュする."""
    global _handler
    if _handler is None:
        return
    atexit.unregister(shutdown_logging)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.removeHandler(_handler)
    _handler.flush()
    _handler.close()
    _handler = None
