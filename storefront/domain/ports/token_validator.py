"""資格情報検証インターフェース."""
from abc import ABC, abstractmethod

from ..value_objects import Claims


class InvalidCredentialError(Exception):
    """資格情報が不正なエラー（形式不正・署名不一致・期限切れ）."""

    pass


class TokenValidator(ABC):
    """ベアラー資格情報の署名と有効期限を検証する.

    純粋な計算のみで I/O を行わない。
    """

    @abstractmethod
    def verify(self, credential: str) -> Claims:
        """資格情報を検証してクレームを返す.

        Raises:
            InvalidCredentialError: 検証に失敗した場合
        """
        pass
