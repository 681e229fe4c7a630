"""
SQLAlchemy implementations of the User and VerificationCode repositories.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from storefront.domain.enums import RecordStatus
from storefront.domain.models.user import User
from storefront.domain.models.verification import VerificationCode
from storefront.domain.repositories.user_repository import UserRepository, VerificationRepository
from storefront.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def _lookup(self, include_deleted: bool):
        query = self.db.query(User)
        if not include_deleted:
            query = query.filter(User.deleted_at.is_(None))
        return query

    def get_by_id(self, id: int) -> Optional[User]:
        """Active account by id; soft-deleted rows are invisible here."""
        return self._lookup(include_deleted=False).filter(User.id == id).first()

    def find_by_email(self, email: str, include_deleted: bool = False) -> Optional[User]:
        return self._lookup(include_deleted).filter(User.email == email).first()

    def find_by_phone(self, phone: str, include_deleted: bool = False) -> Optional[User]:
        return self._lookup(include_deleted).filter(User.phone == phone).first()

    def find_by_guest(self, guest: int, include_deleted: bool = False) -> Optional[User]:
        return self._lookup(include_deleted).filter(User.guest == guest).first()

    def save(self, user: User) -> User:
        self.db.add(user)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def hard_delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.commit()

    def purge_deleted_guests(self) -> int:
        stale = (
            self.db.query(User)
            .filter(
                User.deleted_at.isnot(None),
                User.guest.isnot(None),
                User.email.is_(None),
                User.phone.is_(None),
            )
            .all()
        )
        # ORM deletes so that list rows owned by the account cascade with it
        for user in stale:
            self.db.delete(user)
        self.db.commit()
        return len(stale)


class SQLAlchemyVerificationRepository(SQLAlchemyRepository[VerificationCode], VerificationRepository):
    """VerificationCode repository implementation using SQLAlchemy."""

    def __init__(self, db: Session):
        super().__init__(db, VerificationCode)

    def issue(self, phone: str, code: str) -> VerificationCode:
        return self.create({"phone": phone, "code": code, "status": RecordStatus.ACTIVE.value})

    def consume(self, phone: str, code: str, not_before: datetime) -> bool:
        latest = (
            self.db.query(VerificationCode)
            .filter(
                VerificationCode.phone == phone,
                VerificationCode.status == RecordStatus.ACTIVE.value,
                VerificationCode.created_at > not_before,
            )
            .order_by(VerificationCode.created_at.desc(), VerificationCode.id.desc())
            .first()
        )
        if latest is None or latest.code != code:
            return False

        # Compare-and-swap: only one request can move this row out of ACTIVE
        claimed = (
            self.db.query(VerificationCode)
            .filter(
                VerificationCode.id == latest.id,
                VerificationCode.status == RecordStatus.ACTIVE.value,
            )
            .update({"status": RecordStatus.INACTIVE.value}, synchronize_session=False)
        )
        if claimed != 1:
            self.db.rollback()
            return False

        self.db.query(VerificationCode).filter(VerificationCode.id == latest.id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return True

    def expire_older_than(self, cutoff: datetime) -> int:
        count = (
            self.db.query(VerificationCode)
            .filter(
                VerificationCode.status == RecordStatus.ACTIVE.value,
                VerificationCode.created_at <= cutoff,
            )
            .update({"status": RecordStatus.INACTIVE.value}, synchronize_session=False)
        )
        self.db.commit()
        return count

    def purge_inactive_older_than(self, cutoff: datetime) -> int:
        count = (
            self.db.query(VerificationCode)
            .filter(
                VerificationCode.status == RecordStatus.INACTIVE.value,
                VerificationCode.created_at <= cutoff,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
