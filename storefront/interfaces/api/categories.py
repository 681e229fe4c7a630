"""Category API routes."""

from fastapi import APIRouter, Depends, Request

from storefront.domain.repositories.product_repository import ProductRepository
from storefront.domain.schemas.common import ListParams
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_gate, get_product_repository

router = APIRouter(prefix="/api/category", tags=["Categories"])


@router.get("/list")
def list_categories(
    request: Request,
    repo: ProductRepository = Depends(get_product_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: ListParams, envelope):
        query = repo.categories(descending=params.descending)
        return envelope.success(envelope.page_body(user, envelope.shape_list(query)))

    return gate.execute(request.query_params, ListParams, handler)
