"""Catalog domain models — maps to the 'brands', 'categories' and 'products' tables."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from storefront.domain.enums import RecordStatus
from storefront.infrastructure.database import Base, utcnow


class Brand(Base):
    __tablename__ = "brands"
    __serialize_exclude__ = frozenset({"products"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    logo = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    products = relationship("Product", back_populates="brand")

    def __repr__(self):
        return f"<Brand {self.name}>"


class Category(Base):
    __tablename__ = "categories"
    __serialize_exclude__ = frozenset({"products"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    image = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category {self.name}>"


class Product(Base):
    __tablename__ = "products"
    # Cost price is internal and never serialised
    __serialize_exclude__ = frozenset({"purchase_price"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    unit = Column(String(50), nullable=True)
    purchase_price = Column(Float, nullable=True)
    retail_price = Column(Float, nullable=False, default=0.0)
    current_price = Column(Float, nullable=False, default=0.0)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    brand = relationship("Brand", back_populates="products")
    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product {self.id} - {self.name}>"
