"""ユースケース入力の識別子変換."""
from storefront.domain.identifiers import CatalogId, ProductId
from storefront.domain.services import CartValidationError


def parse_product(product_id: str | None, catalog_id: str | None = None) -> tuple[ProductId, CatalogId | None]:
    """文字列の商品ID・カタログIDを値オブジェクトに変換する.

    Raises:
        CartValidationError: 商品IDが空の場合
    """
    try:
        return ProductId(product_id or ""), CatalogId(catalog_id) if catalog_id else None
    except ValueError as e:
        raise CartValidationError(str(e)) from e
