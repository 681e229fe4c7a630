"""
API Dependencies.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from storefront.application.services.identity_service import IdentityResolver
from storefront.domain.enums import ListType
from storefront.domain.repositories.address_repository import AddressRepository
from storefront.domain.repositories.product_repository import ProductListRepository, ProductRepository
from storefront.infrastructure.database import get_db
from storefront.infrastructure.google_oauth import GoogleOAuthClient
from storefront.infrastructure.repositories.address_repository import SQLAlchemyAddressRepository
from storefront.infrastructure.repositories.product_list_repository import SQLAlchemyProductListRepository
from storefront.infrastructure.repositories.product_repository import SQLAlchemyProductRepository
from storefront.infrastructure.sms_gateway import SmsGatewayClient
from storefront.interfaces.api.gate import ValidationGate


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()


def get_sms_client() -> SmsGatewayClient:
    return SmsGatewayClient()


def get_identity_resolver(
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
    sms: SmsGatewayClient = Depends(get_sms_client),
) -> IdentityResolver:
    return IdentityResolver(db, google, sms)


def get_gate(
    request: Request,
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity_resolver),
) -> ValidationGate:
    """Get the validation gate for the current request."""
    return ValidationGate(request, db, identity)


def get_address_repository(db: Session = Depends(get_db)) -> AddressRepository:
    """Get address repository instance."""
    return SQLAlchemyAddressRepository(db)


def get_product_repository(db: Session = Depends(get_db)) -> ProductRepository:
    """Get product repository instance."""
    return SQLAlchemyProductRepository(db)


def list_repository(list_type: ListType):
    """Dependency factory for one of the per-user product lists."""

    def dependency(db: Session = Depends(get_db)) -> ProductListRepository:
        return SQLAlchemyProductListRepository(db, list_type)

    return dependency
