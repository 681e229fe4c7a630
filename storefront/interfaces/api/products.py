"""Products API routes — catalog search and product detail."""

from fastapi import APIRouter, Body, Depends, Request

from storefront.application.services.product_service import get_product, search_products
from storefront.core.responses import shape_entity
from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.schemas.common import ItemRef
from storefront.domain.schemas.product import ProductSearch
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_gate, get_product_repository

router = APIRouter(prefix="/api/product", tags=["Products"])


@router.get("/search")
def search(
    request: Request,
    repo: ProductRepository = Depends(get_product_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, filters: ProductSearch, envelope):
        found = search_products(repo, filters)
        result = envelope.shape_list(found.listing)
        return envelope.success(
            envelope.page_body(
                user,
                result,
                brands=envelope.shape_list(found.brands, paginate=False).items,
                categories=envelope.shape_list(found.categories, paginate=False).items,
            )
        )

    return gate.execute(request.query_params, ProductSearch, handler)


@router.post("/show")
def show(
    payload: dict = Body(default={}),
    repo: ProductRepository = Depends(get_product_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: ItemRef, envelope):
        product = get_product(repo, params.id)
        return envelope.success({"user": envelope.user_envelope(user), "item": shape_entity(product)})

    return gate.execute(payload, ItemRef, handler)
