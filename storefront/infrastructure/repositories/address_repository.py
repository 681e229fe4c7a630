"""
SQLAlchemy Implementation of Address Repository.
"""

from typing import Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Query, Session, joinedload

from storefront.domain.models.address import Address, Postcode
from storefront.domain.repositories.address_repository import AddressRepository
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyAddressRepository(SQLAlchemyRepository[Address], AddressRepository):
    """Address repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        super().__init__(db, Address)

    def find_postcode(self, code: str) -> Optional[Postcode]:
        return self.db.query(Postcode).filter(Postcode.code == code).first()

    def postcode_exists(self, postcode_id: int) -> bool:
        return self.db.query(Postcode.id).filter(Postcode.id == postcode_id).first() is not None

    def query_for_user(self, user_id: int, descending: bool = False, search: Optional[str] = None) -> Query:
        query = (
            self.db.query(Address)
            .options(joinedload(Address.postcode))
            .filter(Address.user_id == user_id)
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Address.name.ilike(pattern),
                    Address.line_1.ilike(pattern),
                    Address.phone.ilike(pattern),
                )
            )
        ordering = Address.name.desc() if descending else Address.name.asc()
        return query.order_by(ordering, Address.id.asc())

    def get_for_user(self, user_id: int, address_id: int) -> Optional[Address]:
        return (
            self.db.query(Address)
            .options(joinedload(Address.postcode))
            .filter(Address.id == address_id, Address.user_id == user_id)
            .first()
        )

    def count_for_user(self, user_id: int) -> int:
        return self.db.query(func.count(Address.id)).filter(Address.user_id == user_id).scalar() or 0

    def make_default(self, user_id: int, address_id: int) -> None:
        # One statement, so no interleaving request can leave two defaults behind
        self.db.query(Address).filter(Address.user_id == user_id).update(
            {Address.default: case((Address.id == address_id, True), else_=False)},
            synchronize_session=False,
        )
        self.db.commit()
