"""Address service — the caller's address book."""

from storefront.core.exceptions import ApiError, ErrorCode
from storefront.domain.models.address import Address
from storefront.domain.models.user import User
from storefront.domain.repositories.address_repository import AddressRepository
from storefront.domain.schemas.address import AddressCreate, AddressUpdate


def get_address(repo: AddressRepository, user: User, address_id: int) -> Address:
    address = repo.get_for_user(user.id, address_id)
    if address is None:
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)
    return address


def add_address(repo: AddressRepository, user: User, params: AddressCreate) -> Address:
    """Create an address; a user's first address becomes the default."""
    if not repo.postcode_exists(params.postcode_id):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)

    first = repo.count_for_user(user.id) == 0
    data = params.model_dump()
    data.update(user_id=user.id, type=params.type.value, default=False)
    address = repo.create(data)
    if first:
        repo.make_default(user.id, address.id)
    return get_address(repo, user, address.id)


def update_address(repo: AddressRepository, user: User, params: AddressUpdate) -> Address:
    address = get_address(repo, user, params.id)
    changes = params.changes()

    if "postcode_id" in changes and not repo.postcode_exists(changes["postcode_id"]):
        raise ApiError(ErrorCode.ITEM_NOT_FOUND)

    if params.default is False:
        changes["default"] = False
    if changes:
        address = repo.update(address, changes)
    if params.default:
        repo.make_default(user.id, address.id)
    return address


def remove_address(repo: AddressRepository, user: User, address_id: int) -> None:
    address = get_address(repo, user, address_id)
    repo.delete(address.id)
