"""カート検証ユースケース."""
from dataclasses import dataclass

from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity

from .get_cart import CartResult, build_cart_result


@dataclass(frozen=True)
class CartIssueDTO:
    """カート行の問題DTO."""

    product_id: str
    catalog_id: str | None
    action: str
    reason: str
    suggested_quantity: int | None


@dataclass(frozen=True)
class CartValidationResult:
    """カート検証結果."""

    is_valid: bool
    issues: list[CartIssueDTO]
    cart: CartResult


class ValidateCartUseCase:
    """カートの各行が購入可能か検証するユースケース.

    カートは変更しない。削除・数量変更が必要な行を提案として返す。
    """

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(self, identity: Identity) -> CartValidationResult:
        """カートを検証する."""
        report = self._engine.validate_cart(identity)
        issues = [
            CartIssueDTO(
                product_id=issue.product_id.value,
                catalog_id=issue.catalog_id.value if issue.catalog_id else None,
                action=issue.action,
                reason=issue.reason,
                suggested_quantity=issue.suggested_quantity,
            )
            for issue in report.issues
        ]
        return CartValidationResult(
            is_valid=report.is_valid,
            issues=issues,
            cart=build_cart_result(report.cart),
        )
