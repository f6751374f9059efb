"""商品識別子の値オブジェクト."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductId:
    """商品の一意識別子."""

    value: str

    def __post_init__(self) -> None:
        """バリデーション."""
        if not self.value or not self.value.strip():
            raise ValueError("ProductId cannot be empty")

    def __str__(self) -> str:
        """文字列表現."""
        return self.value
