"""Session token blacklist — maps to the 'revoked_tokens' table."""

from sqlalchemy import Column, DateTime, Integer, String

from storefront.infrastructure.database import Base, utcnow


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    jti = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
