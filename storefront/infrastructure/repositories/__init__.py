"""リポジトリ実装モジュール."""
from .dynamodb_cart_repository import DynamoDBCartRepository
from .dynamodb_guest_session_repository import DynamoDBGuestSessionRepository
from .in_memory_cart_repository import InMemoryCartRepository
from .in_memory_guest_session_repository import InMemoryGuestSessionRepository

__all__ = [
    "DynamoDBCartRepository",
    "DynamoDBGuestSessionRepository",
    "InMemoryCartRepository",
    "InMemoryGuestSessionRepository",
]
