"""ゲストカートのユーザーカートへの移行."""
from __future__ import annotations

import logging

from ..entities import Cart, CartItem, GuestSession
from ..identifiers import GuestToken, OwnerKey, UserId

from .cart_state_engine import CartStateEngine
from .guest_session_store import GuestSessionNotFoundError, GuestSessionStore


class MergeFailureError(Exception):
    """カート移行に失敗したエラー.

    rolled_back がFalseの場合は巻き戻しが完了しておらず、
    ゲストの行はユーザーカートに取り込まれたまま残っている。
    """

    def __init__(self, guest_token: GuestToken, user_id: UserId, rolled_back: bool = True) -> None:
        self.guest_token = guest_token
        self.user_id = user_id
        self.rolled_back = rolled_back
        state = "rolled back" if rolled_back else "rollback incomplete"
        super().__init__(f"Failed to migrate guest cart {guest_token.masked()} to user {user_id} ({state})")


class CartMergeService:
    """認証直後にゲストカートをユーザーカートへ一度だけ取り込む.

    同じ行は数量を加算して上限で切り詰め、それ以外の行はそのまま写す。
    書き込み後はセッション、ゲストカートの順に削除する。
    後片付けに失敗した場合はゲスト側を元に戻してからユーザーカートを移行前の行に戻し、
    MergeFailureError を送出する。ゲスト側を戻せなかった場合はユーザーカートを戻さない。
    """

    def __init__(
        self,
        engine: CartStateEngine,
        session_store: GuestSessionStore,
        logger: logging.Logger | None = None,
    ) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
            session_store: ゲストセッションストア
            logger: ロガー
        """
        self._engine = engine
        self._session_store = session_store
        self._logger = logger or logging.getLogger(__name__)

    def migrate(self, guest_token: GuestToken, user_id: UserId) -> Cart:
        """ゲストカートをユーザーカートへ移行する.

        Returns:
            移行後のユーザーカート

        Raises:
            MergeFailureError: 移行に失敗した場合
        """
        guest_key = OwnerKey.for_guest(guest_token)
        user_key = OwnerKey.for_user(user_id)

        guest_cart = self._engine.find(guest_key)
        if guest_cart is None or guest_cart.is_empty():
            self._logger.info("No guest cart to migrate: %s", guest_token.masked())
            return self._engine.load_or_create(user_key)

        session = self._mark_migrating(guest_token)
        try:
            with self._engine.exclusive(guest_key, user_key):
                return self._merge_locked(guest_token, user_id, guest_key, user_key, session)
        except MergeFailureError:
            raise
        except Exception as e:
            self._logger.exception("Cart migration failed: %s", guest_token.masked())
            raise MergeFailureError(guest_token, user_id) from e
        finally:
            if session is not None:
                self._session_store.clear_migrating(session)

    def _mark_migrating(self, guest_token: GuestToken) -> GuestSession | None:
        session = self._session_store.find_by_token(guest_token)
        if session is None:
            self._logger.warning("Migrating guest cart without a session: %s", guest_token.masked())
            return None
        try:
            self._session_store.mark_migrating(session)
        except GuestSessionNotFoundError:
            self._logger.warning("Guest session vanished before migration: %s", guest_token.masked())
            return None
        return session

    def _merge_locked(
        self,
        guest_token: GuestToken,
        user_id: UserId,
        guest_key: OwnerKey,
        user_key: OwnerKey,
        session: GuestSession | None,
    ) -> Cart:
        # 並行した移行が先に完了していれば何もしない
        guest_cart = self._engine.find(guest_key)
        if guest_cart is None or guest_cart.is_empty():
            self._logger.info("Guest cart already migrated: %s", guest_token.masked())
            return self._engine.load_or_create(user_key)

        incoming = guest_cart.get_items()
        before: list[CartItem] = []

        def apply(cart: Cart) -> bool:
            before[:] = cart.get_items()
            cart.merge_items(incoming, self._engine.max_line_quantity)
            return True

        merged = self._engine.mutate(user_key, apply)

        try:
            if session is not None:
                self._session_store.delete(session)
        except Exception as e:
            self._logger.exception("Guest session cleanup failed, rolling back: %s", guest_token.masked())
            rolled_back = self._rollback(user_key, before)
            raise MergeFailureError(guest_token, user_id, rolled_back) from e

        try:
            self._engine.delete_cart(guest_key)
        except Exception as e:
            self._logger.exception("Guest cart cleanup failed, rolling back: %s", guest_token.masked())
            rolled_back = self._rollback(user_key, before, session)
            raise MergeFailureError(guest_token, user_id, rolled_back) from e

        self._logger.info(
            "Guest cart migrated: %s -> %s (%d lines)",
            guest_token.masked(),
            user_key,
            len(incoming),
        )
        return merged

    def _rollback(
        self,
        user_key: OwnerKey,
        before: list[CartItem],
        deleted_session: GuestSession | None = None,
    ) -> bool:
        """ゲスト側、ユーザーカートの順に元に戻す.

        Returns:
            両方を戻せた場合True
        """
        if deleted_session is not None:
            try:
                self._session_store.restore(deleted_session)
            except Exception:
                # ゲストの行はユーザーカートに取り込んだまま残す
                self._logger.exception(
                    "Guest session restore failed, keeping merged cart for %s", user_key
                )
                return False

        def apply(cart: Cart) -> bool:
            cart.replace_items(before)
            return True

        try:
            self._engine.mutate(user_key, apply)
        except Exception:
            self._logger.exception("Cart migration rollback failed for %s", user_key)
            return False
        return True
