"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import get_settings
from storefront.infrastructure.database import init_db
from storefront.core.logging import configure_logging
from storefront.core.middleware import setup_middleware
from storefront.core.handlers import register_exception_handlers

# Import all models so SQLAlchemy knows about them
from storefront.domain.models.user import User  # noqa: F401
from storefront.domain.models.verification import VerificationCode  # noqa: F401
from storefront.domain.models.revoked_token import RevokedToken  # noqa: F401
from storefront.domain.models.address import Address, Postcode  # noqa: F401
from storefront.domain.models.product import Brand, Category, Product  # noqa: F401
from storefront.domain.models.product_list import CartItem, FavoriteItem, Order, OrderDetail  # noqa: F401

# Import routers
from storefront.interfaces.api.auth import router as auth_router
from storefront.interfaces.api.user import router as user_router
from storefront.interfaces.api.addresses import router as addresses_router
from storefront.interfaces.api.products import router as products_router
from storefront.interfaces.api.categories import router as categories_router
from storefront.interfaces.api.lists import cart_router, favorites_router, orders_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting storefront API...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only, use migrations in production)
    init_db()
    logger.info("Database tables created/verified")

    from storefront.scheduler.jobs import start_scheduler
    start_scheduler()

    yield

    from storefront.scheduler.jobs import stop_scheduler
    stop_scheduler()
    logger.info("Storefront API stopped")


app = FastAPI(
    title=settings.APP_NAME,
    description="Mobile storefront backend — accounts, address book, catalog and lists",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Every failure is rendered as an error envelope
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(addresses_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(cart_router)
app.include_router(favorites_router)
app.include_router(orders_router)


@app.get("/")
def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
