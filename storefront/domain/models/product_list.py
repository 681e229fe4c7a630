"""Per-user product lists — cart, favorites and orders."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.infrastructure.database import Base, utcnow


class CartItem(Base):
    __tablename__ = "handcarts"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_handcart_user_product"),)
    __serialize_exclude__ = frozenset({"user"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product")


class FavoriteItem(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_favorite_user_product"),)
    __serialize_exclude__ = frozenset({"user"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="favorites")
    product = relationship("Product")


class Order(Base):
    __tablename__ = "orders"
    __serialize_exclude__ = frozenset({"user"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="PLACED")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="orders")
    details = relationship("OrderDetail", back_populates="order", cascade="all, delete-orphan")


class OrderDetail(Base):
    """Order line; prices are frozen at the moment the order was placed."""

    __tablename__ = "order_details"
    __serialize_exclude__ = frozenset({"order"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    retail_price = Column(Float, nullable=False, default=0.0)
    deal_price = Column(Float, nullable=False, default=0.0)

    order = relationship("Order", back_populates="details")
    product = relationship("Product")
