"""
SQLAlchemy Implementation of the per-user list repositories (cart, favorites, orders).
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from storefront.domain.enums import ListType
from storefront.domain.models.product import Product
from storefront.domain.models.product_list import CartItem, FavoriteItem, Order, OrderDetail
from storefront.domain.repositories.product_repository import ProductListRepository
from storefront.domain.schemas.product import PriceDetails
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository

LIST_MODELS = {
    ListType.HANDCART: CartItem,
    ListType.FAVORITES: FavoriteItem,
    ListType.ORDERS: Order,
}


class SQLAlchemyProductListRepository(SQLAlchemyRepository, ProductListRepository):
    """One user list backed by its own table."""

    def __init__(self, db: Session, list_type: ListType):
        super().__init__(db, LIST_MODELS[list_type])
        self.list_type = list_type

    def query_for_user(self, user_id: int, descending: bool = False, search: Optional[str] = None) -> Query:
        model = self.model
        pattern = f"%{search}%" if search else None

        if self.list_type is ListType.ORDERS:
            query = self.db.query(Order).options(
                selectinload(Order.details).joinedload(OrderDetail.product).joinedload(Product.brand)
            )
            if pattern:
                query = query.filter(Order.details.any(OrderDetail.product.has(Product.name.ilike(pattern))))
        else:
            query = self.db.query(model).options(joinedload(model.product).joinedload(Product.brand))
            if pattern:
                query = query.filter(model.product.has(Product.name.ilike(pattern)))

        query = query.filter(model.user_id == user_id)
        ordering = model.created_at.desc() if descending else model.created_at.asc()
        return query.order_by(ordering, model.id.asc())

    def price_details(self, user_id: int, search: Optional[str] = None) -> PriceDetails:
        """Totals over every matching line, not just the current page."""
        rows = self.query_for_user(user_id, search=search).all()
        if self.list_type is ListType.ORDERS:
            lines = [
                (detail.quantity, detail.retail_price, detail.deal_price)
                for order in rows
                for detail in order.details
            ]
        else:
            lines = [
                (item.quantity, item.product.retail_price, item.product.current_price)
                for item in rows
                if item.product is not None
            ]
        return PriceDetails(
            quantity=sum(quantity for quantity, _, _ in lines),
            retail_price=round(sum(quantity * retail for quantity, retail, _ in lines), 2),
            current_price=round(sum(quantity * current for quantity, _, current in lines), 2),
        )

    def _line(self, user_id: int, product_id: int) -> Query:
        return self.db.query(self.model).filter(
            self.model.user_id == user_id, self.model.product_id == product_id
        )

    def _increment(self, user_id: int, product_id: int, quantity: int) -> int:
        return self._line(user_id, product_id).update(
            {self.model.quantity: self.model.quantity + quantity}, synchronize_session=False
        )

    def add(self, user_id: int, product_id: int, quantity: int) -> None:
        if self._increment(user_id, product_id, quantity) == 0:
            self.db.add(self.model(user_id=user_id, product_id=product_id, quantity=quantity))
            try:
                self.db.commit()
                return
            except IntegrityError:
                # Another request inserted the line first
                self.db.rollback()
                self._increment(user_id, product_id, quantity)
        self.db.commit()

    def set_quantity(self, user_id: int, product_id: int, quantity: int) -> bool:
        updated = self._line(user_id, product_id).update(
            {self.model.quantity: quantity}, synchronize_session=False
        )
        self.db.commit()
        return updated > 0

    def remove(self, user_id: int, product_id: int) -> bool:
        deleted = self._line(user_id, product_id).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0
