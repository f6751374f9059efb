"""ゲストカート移行ユースケース."""
from storefront.domain.identifiers import GuestToken, UserId
from storefront.domain.services import CartMergeService, CartValidationError
from storefront.domain.value_objects import Identity

from .get_cart import CartResult, build_cart_result


class MigrateGuestCartUseCase:
    """認証直後にゲストカートをユーザーカートへ移行するユースケース."""

    def __init__(self, merge_service: CartMergeService) -> None:
        """初期化.

        Args:
            merge_service: カート移行サービス
        """
        self._merge_service = merge_service

    def execute(self, identity: Identity, guest_token: str) -> CartResult:
        """ゲストカートを主体のユーザーカートへ移行する.

        Args:
            identity: 認証済みユーザーの主体
            guest_token: 移行元のゲストセッショントークン

        Returns:
            移行後のユーザーカート

        Raises:
            CartValidationError: 主体がユーザーでない、またはトークンが不正な場合
            MergeFailureError: 移行に失敗した場合
        """
        if not identity.is_user():
            raise CartValidationError("Cart migration requires an authenticated user")
        try:
            token = GuestToken(guest_token or "")
        except ValueError as e:
            raise CartValidationError(str(e)) from e
        cart = self._merge_service.migrate(token, UserId(identity.id))
        return build_cart_result(cart)
