"""Product service — catalog search and the per-user product lists."""

from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy.orm import Query

from storefront.core.exceptions import ApiError, ErrorCode
from storefront.domain.enums import ListType
from storefront.domain.models.product import Brand, Category, Product
from storefront.domain.models.user import User
from storefront.domain.repositories.product_repository import ProductListRepository, ProductRepository
from storefront.domain.schemas.product import ListAdd, ListUpdate, PriceDetails, ProductSearch


@dataclass
class CatalogSearch:
    listing: Query
    brands: List[Brand]
    categories: List[Category]


def search_products(repo: ProductRepository, filters: ProductSearch) -> CatalogSearch:
    """Active products matching ``filters`` plus the brands/categories they span."""
    if filters.brand_id is not None and not repo.brand_exists(filters.brand_id):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    if filters.category_id is not None and not repo.category_exists(filters.category_id):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)

    base = repo.search_query(filters)
    return CatalogSearch(
        listing=repo.listing(base, descending=filters.descending),
        brands=repo.brands_in(base),
        categories=repo.categories_in(base),
    )


def get_product(repo: ProductRepository, product_id: int) -> Product:
    product = repo.get_with_catalog(product_id)
    if product is None:
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    return product


def format_amount(value: float) -> str:
    """Rupee amount without trailing zeros: 150.0 -> '150', 99.5 -> '99.5'."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def price_summary(details: PriceDetails, list_type: ListType) -> Dict[str, Any]:
    """The ``details`` block of a list response."""
    if details.quantity <= 0:
        return {"message": f"There are currently no items in your {list_type.value}."}

    message = (
        f"Total {details.quantity} items worth ₹{format_amount(details.current_price)} "
        f"in your {list_type.value}"
    )
    if details.savings > 0:
        if list_type is ListType.ORDERS:
            message += f", you have saved ₹{format_amount(details.savings)} per item so far."
        else:
            message += f", you will save ₹{format_amount(details.savings)} if you order now."
    else:
        message += "."

    return {
        "quantity": details.quantity,
        "retail_price": details.retail_price,
        "current_price": details.current_price,
        "message": message,
    }


def add_to_list(
    lists: ProductListRepository, products: ProductRepository, user: User, params: ListAdd
) -> str:
    if not products.is_available(params.id):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    lists.add(user.id, params.id, params.quantity)
    return f"Item added to your {lists.list_type.value} successfully."


def remove_from_list(lists: ProductListRepository, user: User, product_id: int) -> str:
    if not lists.remove(user.id, product_id):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    return f"Item removed from your {lists.list_type.value} successfully."


def update_in_list(lists: ProductListRepository, user: User, params: ListUpdate) -> str:
    """Set a line's quantity; zero removes the line."""
    if params.quantity == 0:
        return remove_from_list(lists, user, params.id)
    if not lists.set_quantity(user.id, params.id, params.quantity):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    return f"Item quantity updated in your {lists.list_type.value} successfully."
