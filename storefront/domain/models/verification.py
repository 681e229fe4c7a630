"""One-time phone verification codes — maps to the 'verification_codes' table."""

from sqlalchemy import Column, DateTime, Integer, String

from storefront.domain.enums import RecordStatus
from storefront.infrastructure.database import Base, utcnow


class VerificationCode(Base):
    __tablename__ = "verification_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    phone = Column(String(20), nullable=False, index=True)
    code = Column(String(4), nullable=False)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<VerificationCode {self.phone} {self.status}>"
