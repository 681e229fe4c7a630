"""
SQLAlchemy Implementation of Product Repository.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload

from storefront.domain.enums import RecordStatus
from storefront.domain.models.product import Brand, Category, Product
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.schemas.product import ProductSearch
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyProductRepository(SQLAlchemyRepository[Product], ProductRepository):
    """Product repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        super().__init__(db, Product)

    def search_query(self, filters: ProductSearch) -> Query:
        query = self.db.query(Product).filter(Product.status == RecordStatus.ACTIVE.value)

        if filters.brand_id is not None:
            query = query.filter(Product.brand_id == filters.brand_id)
        if filters.category_id is not None:
            query = query.filter(Product.category_id == filters.category_id)
        if filters.min_price is not None:
            query = query.filter(Product.current_price >= filters.min_price)
        if filters.max_price is not None:
            query = query.filter(Product.current_price <= filters.max_price)
        if filters.query:
            pattern = f"%{filters.query}%"
            query = query.filter(
                or_(
                    Product.name.ilike(pattern),
                    Product.description.ilike(pattern),
                    Product.brand.has(Brand.name.ilike(pattern)),
                    Product.category.has(Category.name.ilike(pattern)),
                )
            )
        return query

    def listing(self, base: Query, descending: bool = False) -> Query:
        ordering = Product.retail_price.desc() if descending else Product.retail_price.asc()
        return base.options(
            joinedload(Product.brand), joinedload(Product.category)
        ).order_by(ordering, Product.id.asc())

    def brands_in(self, base: Query) -> List[Brand]:
        ids = {row[0] for row in base.with_entities(Product.brand_id).distinct() if row[0] is not None}
        if not ids:
            return []
        return self.db.query(Brand).filter(Brand.id.in_(ids)).order_by(Brand.name.asc()).all()

    def categories_in(self, base: Query) -> List[Category]:
        ids = {row[0] for row in base.with_entities(Product.category_id).distinct() if row[0] is not None}
        if not ids:
            return []
        return self.db.query(Category).filter(Category.id.in_(ids)).order_by(Category.name.asc()).all()

    def get_with_catalog(self, product_id: int) -> Optional[Product]:
        return (
            self.db.query(Product)
            .options(joinedload(Product.brand), joinedload(Product.category))
            .filter(Product.id == product_id)
            .first()
        )

    def is_available(self, product_id: int) -> bool:
        return (
            self.db.query(Product.id)
            .filter(Product.id == product_id, Product.status == RecordStatus.ACTIVE.value)
            .first()
            is not None
        )

    def brand_exists(self, brand_id: int) -> bool:
        return self.db.get(Brand, brand_id) is not None

    def category_exists(self, category_id: int) -> bool:
        return self.db.get(Category, category_id) is not None

    def categories(self, descending: bool = False) -> Query:
        ordering = Category.name.desc() if descending else Category.name.asc()
        return self.db.query(Category).order_by(ordering, Category.id.asc())
