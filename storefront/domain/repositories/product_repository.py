"""
Product Repository Interface.
Defines catalog and per-user list data access.
"""

from typing import List, Optional, Protocol

from sqlalchemy.orm import Query

from storefront.domain.enums import ListType
from storefront.domain.models.product import Brand, Category, Product
from storefront.domain.repositories.base import BaseRepository
from storefront.domain.schemas.product import PriceDetails, ProductSearch


class ProductRepository(BaseRepository[Product]):
    """Interface for catalog queries."""

    def search_query(self, filters: ProductSearch) -> Query:
        """Active products matching the filters, without ordering or eager loads."""
        ...

    def listing(self, base: Query, descending: bool = False) -> Query:
        """``base`` with brand/category loaded, ordered by retail price."""
        ...

    def brands_in(self, base: Query) -> List[Brand]:
        ...

    def categories_in(self, base: Query) -> List[Category]:
        ...

    def get_with_catalog(self, product_id: int) -> Optional[Product]:
        ...

    def is_available(self, product_id: int) -> bool:
        """Product exists and is ACTIVE."""
        ...

    def brand_exists(self, brand_id: int) -> bool:
        ...

    def category_exists(self, category_id: int) -> bool:
        ...

    def categories(self, descending: bool = False) -> Query:
        ...


class ProductListRepository(Protocol):
    """Interface for one user list (cart, favorites or orders)."""

    list_type: ListType

    def query_for_user(self, user_id: int, descending: bool = False, search: Optional[str] = None) -> Query:
        ...

    def price_details(self, user_id: int, search: Optional[str] = None) -> PriceDetails:
        ...

    def add(self, user_id: int, product_id: int, quantity: int) -> None:
        ...

    def set_quantity(self, user_id: int, product_id: int, quantity: int) -> bool:
        ...

    def remove(self, user_id: int, product_id: int) -> bool:
        ...
