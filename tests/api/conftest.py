"""APIテスト共通フィクスチャ."""
import pytest

from storefront.api.dependencies import Dependencies
from storefront.config import Settings

SECRET = "api-test-secret"


@pytest.fixture(autouse=True)
def reset_dependencies():
    """各テスト前に依存性をリセットし、インメモリ実装を使う."""
    Dependencies.reset()
    Dependencies.set_settings(Settings(jwt_secret=SECRET))
    yield
    Dependencies.reset()
