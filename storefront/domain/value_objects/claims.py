"""検証済み資格情報のクレーム."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Claims:
    """署名と有効期限の検証を通過したトークンのクレーム."""

    user_id: str
    role: str
    expires_at: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        """バリデーション."""
        if not self.user_id:
            raise ValueError("Claims must carry a user id")
