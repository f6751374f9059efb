"""外部サービス連携モジュール."""
from .in_memory_product_catalog import InMemoryProductCatalog

__all__ = [
    "InMemoryProductCatalog",
]
