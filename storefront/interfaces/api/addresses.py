"""Address API routes — postcode lookup and the caller's address book."""

from fastapi import APIRouter, Body, Depends, Request

from storefront.application.services.address_service import (
    add_address,
    get_address,
    remove_address,
    update_address,
)
from storefront.core.exceptions import ApiError, ErrorCode
from storefront.core.responses import shape_entity
from storefront.domain.repositories.address_repository import AddressRepository
from storefront.domain.schemas.address import AddressCreate, AddressUpdate, PostcodeLookup
from storefront.domain.schemas.common import ItemRef, ListParams, SearchParams
from storefront.interfaces.api.gate import ValidationGate
from storefront.interfaces.deps import get_address_repository, get_gate

router = APIRouter(prefix="/api/address", tags=["Address"])


@router.post("/postcode")
def postcode(
    payload: dict = Body(default={}),
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: PostcodeLookup, envelope):
        result = repo.find_postcode(params.postcode)
        if result is None:
            raise ApiError(ErrorCode.ITEM_NOT_FOUND)
        return envelope.success({"user": envelope.user_envelope(user), "item": shape_entity(result)})

    return gate.execute(payload, PostcodeLookup, handler)


@router.get("/search")
def search(
    request: Request,
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: SearchParams, envelope):
        query = repo.query_for_user(user.id, descending=params.descending, search=params.query)
        return envelope.success(envelope.page_body(user, envelope.shape_list(query)))

    return gate.execute(request.query_params, SearchParams, handler)


@router.get("/list")
def list_addresses(
    request: Request,
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: ListParams, envelope):
        query = repo.query_for_user(user.id, descending=params.descending)
        return envelope.success(envelope.page_body(user, envelope.shape_list(query)))

    return gate.execute(request.query_params, ListParams, handler)


@router.post("/add")
def add(
    payload: dict = Body(default={}),
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: AddressCreate, envelope):
        address = add_address(repo, user, params)
        return envelope.success(
            {
                "user": envelope.user_envelope(user),
                "item": shape_entity(address),
                "message": "Address created successfully.",
            }
        )

    return gate.execute(payload, AddressCreate, handler)


@router.post("/show")
def show(
    payload: dict = Body(default={}),
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: ItemRef, envelope):
        address = get_address(repo, user, params.id)
        return envelope.success({"user": envelope.user_envelope(user), "item": shape_entity(address)})

    return gate.execute(payload, ItemRef, handler)


@router.put("/update")
def update(
    payload: dict = Body(default={}),
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: AddressUpdate, envelope):
        update_address(repo, user, params)
        return envelope.success(
            {"user": envelope.user_envelope(user), "message": "Address updated successfully."}
        )

    return gate.execute(payload, AddressUpdate, handler)


@router.delete("/delete")
def delete(
    payload: dict = Body(default={}),
    repo: AddressRepository = Depends(get_address_repository),
    gate: ValidationGate = Depends(get_gate),
):
    def handler(user, params: ItemRef, envelope):
        remove_address(repo, user, params.id)
        return envelope.success(
            {"user": envelope.user_envelope(user), "message": "Address removed successfully."}
        )

    return gate.execute(payload, ItemRef, handler)
