"""User domain model — maps to the 'users' table."""

from typing import Any, Dict

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from storefront.domain.enums import AccountState, RecordStatus
from storefront.infrastructure.database import Base, utcnow

CUSTOMER_ROLE = "customer"


class User(Base):
    __tablename__ = "users"
    __serialize_exclude__ = frozenset(
        {"role", "status", "google", "addresses", "cart_items", "favorites", "orders"}
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=True)
    # One row per credential; linking merges credentials onto a single row
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone = Column(String(20), unique=True, nullable=True, index=True)
    guest = Column(BigInteger, unique=True, nullable=True, index=True)
    photo = Column(String(500), nullable=True)
    google = Column(String(255), nullable=True)
    role = Column(String(50), nullable=False, default=CUSTOMER_ROLE)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    deleted_at = Column(DateTime, nullable=True, index=True)

    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    favorites = relationship("FavoriteItem", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user", cascade="all, delete-orphan")

    @property
    def state(self) -> AccountState:
        return AccountState.DELETED if self.deleted_at is not None else AccountState.ACTIVE

    @property
    def is_deleted(self) -> bool:
        return self.state is AccountState.DELETED

    @property
    def has_linked_channel(self) -> bool:
        return bool(self.email or self.phone)

    def has_role(self, role: str) -> bool:
        return self.role == role

    def soft_delete(self) -> None:
        if self.state is AccountState.DELETED:
            raise ValueError(f"User {self.id} is already deleted")
        self.status = RecordStatus.INACTIVE.value
        self.deleted_at = utcnow()

    def restore(self) -> None:
        if self.state is AccountState.ACTIVE:
            raise ValueError(f"User {self.id} is not deleted")
        self.status = RecordStatus.ACTIVE.value
        self.deleted_at = None

    def recoverable_snapshot(self) -> Dict[str, Any]:
        """Non-null identity fields shown to a client holding a deleted account."""
        fields = {"email": self.email, "phone": self.phone, "photo": self.photo, "name": self.name}
        return {key: value for key, value in fields.items() if value}

    def __repr__(self):
        return f"<User {self.id}>"
