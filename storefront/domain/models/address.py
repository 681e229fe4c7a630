"""Address book — maps to the 'postcodes' and 'addresses' tables."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from storefront.domain.enums import AddressType, RecordStatus
from storefront.infrastructure.database import Base, utcnow


class Postcode(Base):
    __tablename__ = "postcodes"
    __serialize_exclude__ = frozenset({"addresses"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), nullable=False, index=True)
    city = Column(String(100), nullable=True)
    district = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    addresses = relationship("Address", back_populates="postcode")

    def __repr__(self):
        return f"<Postcode {self.code}>"


class Address(Base):
    __tablename__ = "addresses"
    __serialize_exclude__ = frozenset({"user"})

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    postcode_id = Column(Integer, ForeignKey("postcodes.id"), nullable=False)
    name = Column(String(200), nullable=False)
    care_of = Column(String(200), nullable=True)
    phone = Column(String(20), nullable=True)
    line_1 = Column(String(255), nullable=False)
    line_2 = Column(String(255), nullable=True)
    type = Column(String(20), nullable=False, default=AddressType.HOME.value)
    default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="addresses")
    postcode = relationship("Postcode", back_populates="addresses")

    def __repr__(self):
        return f"<Address {self.id} - {self.name}>"
