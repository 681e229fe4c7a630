"""List API routes — cart, favorites and orders.

The three lists share one set of handlers; orders are read-only.
"""

from fastapi import APIRouter, Body, Depends, Request

from storefront.application.services.product_service import (
    add_to_list,
    price_summary,
    remove_from_list,
    update_in_list,
)
from storefront.domain.enums import ListType
from storefront.domain.repositories.product_repository import ProductListRepository, ProductRepository
from storefront.domain.schemas.common import ItemRef, ListParams, SearchParams
from storefront.domain.schemas.product import ListAdd, ListUpdate
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_gate, get_product_repository, list_repository


def build_router(path: str, list_type: ListType) -> APIRouter:
    router = APIRouter(prefix=f"/api/{path}", tags=[list_type.value])
    get_lists = list_repository(list_type)

    def listing(lists: ProductListRepository, user, params: ListParams, envelope, search=None):
        query = lists.query_for_user(user.id, descending=params.descending, search=search)
        details = price_summary(lists.price_details(user.id, search=search), list_type)
        return envelope.success(envelope.page_body(user, envelope.shape_list(query), details=details))

    @router.get("/list")
    def get_list(
        request: Request,
        lists: ProductListRepository = Depends(get_lists),
        gate: ValidationGate = Depends(get_gate),
    ):
        def handler(user, params: ListParams, envelope):
            return listing(lists, user, params, envelope)

        return gate.execute(request.query_params, ListParams, handler)

    @router.get("/search")
    def search_list(
        request: Request,
        lists: ProductListRepository = Depends(get_lists),
        gate: ValidationGate = Depends(get_gate),
    ):
        def handler(user, params: SearchParams, envelope):
            return listing(lists, user, params, envelope, search=params.query)

        return gate.execute(request.query_params, SearchParams, handler)

    if not list_type.is_mutable:
        return router

    @router.post("/add")
    def add(
        payload: dict = Body(default={}),
        lists: ProductListRepository = Depends(get_lists),
        products: ProductRepository = Depends(get_product_repository),
        gate: ValidationGate = Depends(get_gate),
    ):
        def handler(user, params: ListAdd, envelope):
            message = add_to_list(lists, products, user, params)
            return envelope.success({"user": envelope.user_envelope(user), "message": message})

        return gate.execute(payload, ListAdd, handler)

    @router.put("/update")
    def update(
        payload: dict = Body(default={}),
        lists: ProductListRepository = Depends(get_lists),
        gate: ValidationGate = Depends(get_gate),
    ):
        def handler(user, params: ListUpdate, envelope):
            message = update_in_list(lists, user, params)
            return envelope.success({"user": envelope.user_envelope(user), "message": message})

        return gate.execute(payload, ListUpdate, handler)

    @router.delete("/remove")
    def remove(
        payload: dict = Body(default={}),
        lists: ProductListRepository = Depends(get_lists),
        gate: ValidationGate = Depends(get_gate),
    ):
        def handler(user, params: ItemRef, envelope):
            message = remove_from_list(lists, user, params.id)
            return envelope.success({"user": envelope.user_envelope(user), "message": message})

        return gate.execute(payload, ItemRef, handler)

    return router


cart_router = build_router("cart", ListType.HANDCART)
favorites_router = build_router("favorites", ListType.FAVORITES)
orders_router = build_router("orders", ListType.ORDERS)
