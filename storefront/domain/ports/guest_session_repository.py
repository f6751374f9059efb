"""ゲストセッションリポジトリインターフェース."""
from abc import ABC, abstractmethod
from datetime import datetime

from ..entities import GuestSession
from ..identifiers import GuestToken


class GuestSessionAlreadyExistsError(Exception):
    """同じトークンのセッションが既に存在するエラー."""

    def __init__(self, token: GuestToken) -> None:
        self.token = token
        super().__init__(f"Guest session already exists: {token.masked()}")


class GuestSessionRepository(ABC):
    """ゲストセッションリポジトリのインターフェース."""

    @abstractmethod
    def add(self, session: GuestSession) -> None:
        """新しいセッションを登録する.

        Raises:
            GuestSessionAlreadyExistsError: 同じトークンが既に存在する場合
        """
        pass

    @abstractmethod
    def find_by_token(self, token: GuestToken) -> GuestSession | None:
        """トークンで検索する."""
        pass

    @abstractmethod
    def update_last_seen(self, token: GuestToken, seen_at: datetime) -> bool:
        """最終アクセス時刻を更新する（存在しない場合はFalse）."""
        pass

    @abstractmethod
    def set_migrating(self, token: GuestToken, since: datetime) -> bool:
        """移行中マークを設定する（存在しない場合はFalse）."""
        pass

    @abstractmethod
    def clear_migrating(self, token: GuestToken) -> bool:
        """移行中マークを外す（存在しない場合はFalse）."""
        pass

    @abstractmethod
    def delete(self, token: GuestToken) -> None:
        """セッションを削除する（存在しない場合は何もしない）."""
        pass

    @abstractmethod
    def delete_if_sweepable(self, token: GuestToken, now: datetime) -> bool:
        """期限切れかつ移行中でない場合に限りアトミックに削除する.

        Returns:
            削除した場合True
        """
        pass

    @abstractmethod
    def find_expired(self, now: datetime, limit: int) -> list[GuestSession]:
        """期限切れのセッションを検索する（移行中のものを含む）."""
        pass

    @abstractmethod
    def find_all(self) -> list[GuestSession]:
        """全セッションを取得する（統計用）."""
        pass
