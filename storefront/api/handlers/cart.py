"""カートAPI ハンドラー."""
import functools
import logging
from collections.abc import Callable
from typing import Any

from storefront.api.auth import request_fields_from_event, resolve_identity
from storefront.api.dependencies import Dependencies
from storefront.api.request import get_body, get_path_parameter, get_query_parameter
from storefront.api.response import (
    bad_request_response,
    conflict_response,
    forbidden_response,
    guest_session_headers,
    internal_error_response,
    success_response,
    unauthorized_response,
)
from storefront.application.use_cases import (
    AddToCartUseCase,
    CartResult,
    ClearCartUseCase,
    GetCartSummaryUseCase,
    GetCartUseCase,
    MigrateGuestCartUseCase,
    RemoveFromCartUseCase,
    UpdateCartItemUseCase,
    ValidateCartUseCase,
)
from storefront.domain.services import (
    CartConflictError,
    CartValidationError,
    ForbiddenError,
    MergeFailureError,
    NoIdentityError,
    SessionExpiredError,
    UnauthenticatedError,
    extract_guest_token,
)
from storefront.domain.value_objects import Identity, RoutePolicy
from storefront.domain.value_objects.route_policy import AUTHENTICATED_USER, USER_CART

logger = logging.getLogger(__name__)

CartAction = Callable[[dict, Identity], Any]


def cart_endpoint(policy: RoutePolicy, status_code: int = 200) -> Callable[[CartAction], Callable[[dict, Any], dict]]:
    """主体解決とエラー変換を行うハンドラーデコレータ.

    ゲストとして処理した場合はエラー時も含めてセッショントークンをレスポンスヘッダーで返す。
    """

    def decorator(action: CartAction) -> Callable[[dict, Any], dict]:
        @functools.wraps(action)
        def handler(event: dict, context: Any) -> dict:
            resolved = None
            try:
                resolved = resolve_identity(event, policy)
                body = action(event, resolved.identity)
            except SessionExpiredError as e:
                response = unauthorized_response(str(e), error_code="SESSION_EXPIRED", event=event)
            except UnauthenticatedError as e:
                response = unauthorized_response(str(e), event=event)
            except ForbiddenError as e:
                response = forbidden_response(str(e), event=event)
            except NoIdentityError as e:
                response = unauthorized_response(str(e), error_code="NO_IDENTITY", event=event)
            except CartValidationError as e:
                response = bad_request_response(str(e), event=event)
            except CartConflictError as e:
                response = conflict_response(str(e), event=event)
            except MergeFailureError as e:
                response = conflict_response(str(e), error_code="MERGE_FAILED", event=event)
            except Exception:
                logger.exception("Unexpected error in %s", action.__name__)
                response = internal_error_response(event=event)
            else:
                response = success_response(body, status_code=status_code, event=event)

            if resolved is not None:
                response["headers"].update(guest_session_headers(resolved.guest_session))
            return response

        return handler

    return decorator


def _read_body(event: dict) -> dict[str, Any]:
    try:
        return get_body(event)
    except ValueError as e:
        raise CartValidationError(str(e)) from e


def _require_str(body: dict[str, Any], name: str) -> str:
    value = body.get(name)
    if not isinstance(value, str) or not value.strip():
        raise CartValidationError(f"{name} must be a non-empty string")
    return value


def _optional_str(body: dict[str, Any], name: str) -> str | None:
    value = body.get(name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise CartValidationError(f"{name} must be a string")
    return value


def _cart_to_dict(result: CartResult) -> dict[str, Any]:
    return {
        "owner_key": result.owner_key,
        "items": [
            {
                "product_id": item.product_id,
                "catalog_id": item.catalog_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price.value if item.unit_price else None,
                "amount": item.amount.value,
                "added_at": item.added_at.isoformat(),
            }
            for item in result.items
        ],
        "item_count": result.item_count,
        "total_quantity": result.total_quantity,
        "total_amount": result.total_amount.value,
        "is_empty": result.is_empty,
        "version": result.version,
    }


@cart_endpoint(USER_CART)
def get_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """カートを取得する.

    GET /cart

    Returns:
        カート情報
    """
    use_case = GetCartUseCase(Dependencies.get_cart_state_engine())
    return _cart_to_dict(use_case.execute(identity))


@cart_endpoint(USER_CART, status_code=201)
def add_to_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """商品をカートに追加する.

    POST /cart/items

    Request Body:
        product_id: 商品ID
        catalog_id: カタログID（オプション）
        quantity: 数量（省略時は1）

    Returns:
        追加後のカート
    """
    body = _read_body(event)
    use_case = AddToCartUseCase(Dependencies.get_cart_state_engine())
    result = use_case.execute(
        identity,
        product_id=_require_str(body, "product_id"),
        quantity=body.get("quantity", 1),
        catalog_id=_optional_str(body, "catalog_id"),
    )
    return _cart_to_dict(result)


@cart_endpoint(USER_CART)
def update_cart_item(event: dict, identity: Identity) -> dict[str, Any]:
    """カート行の数量を設定する（0以下は削除）.

    PUT /cart/items

    Request Body:
        product_id: 商品ID
        catalog_id: カタログID（オプション）
        quantity: 数量
    """
    body = _read_body(event)
    if "quantity" not in body:
        raise CartValidationError("quantity is required")
    use_case = UpdateCartItemUseCase(Dependencies.get_cart_state_engine())
    result = use_case.execute(
        identity,
        product_id=_require_str(body, "product_id"),
        quantity=body["quantity"],
        catalog_id=_optional_str(body, "catalog_id"),
    )
    return _cart_to_dict(result)


@cart_endpoint(USER_CART)
def remove_from_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """カートから行を削除する.

    DELETE /cart/items/{product_id}?catalog_id=...
    """
    product_id = get_path_parameter(event, "product_id")
    if not product_id:
        raise CartValidationError("product_id is required")
    use_case = RemoveFromCartUseCase(Dependencies.get_cart_state_engine())
    result = use_case.execute(identity, product_id, get_query_parameter(event, "catalog_id"))
    return _cart_to_dict(result)


@cart_endpoint(USER_CART)
def clear_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """カートを空にする.

    DELETE /cart
    """
    use_case = ClearCartUseCase(Dependencies.get_cart_state_engine())
    return _cart_to_dict(use_case.execute(identity))


@cart_endpoint(USER_CART)
def get_cart_summary(event: dict, identity: Identity) -> dict[str, Any]:
    """カートの集計値を取得する.

    GET /cart/summary
    """
    use_case = GetCartSummaryUseCase(Dependencies.get_cart_state_engine())
    result = use_case.execute(identity)
    return {
        "item_count": result.item_count,
        "total_quantity": result.total_quantity,
        "total_amount": result.total_amount.value,
    }


@cart_endpoint(USER_CART)
def validate_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """カートの各行が購入可能か検証する.

    GET /cart/validation
    """
    use_case = ValidateCartUseCase(Dependencies.get_cart_state_engine())
    result = use_case.execute(identity)
    return {
        "is_valid": result.is_valid,
        "issues": [
            {
                "product_id": issue.product_id,
                "catalog_id": issue.catalog_id,
                "action": issue.action,
                "reason": issue.reason,
                "suggested_quantity": issue.suggested_quantity,
            }
            for issue in result.issues
        ],
        "cart": _cart_to_dict(result.cart),
    }


@cart_endpoint(AUTHENTICATED_USER)
def migrate_guest_cart(event: dict, identity: Identity) -> dict[str, Any]:
    """ログイン直後にゲストカートをユーザーカートへ移行する.

    POST /cart/migrate

    ゲストセッショントークンは x-session-id ヘッダー等、またはボディの sessionId で渡す。
    """
    guest_token = extract_guest_token(request_fields_from_event(event))
    if guest_token is None:
        raise CartValidationError("sessionId is required")
    use_case = MigrateGuestCartUseCase(Dependencies.get_cart_merge_service())
    return _cart_to_dict(use_case.execute(identity, guest_token))
