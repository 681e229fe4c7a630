"""Shared field types and listing parameters."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, StringConstraints

from storefront.domain.enums import SortOrder


def _stringify_number(value: Any) -> Any:
    # JSON clients send phone numbers both as numbers and as strings
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


NumericString = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^\d{1,20}$"),
    BeforeValidator(_stringify_number),
]

RequiredText = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1),
    BeforeValidator(_stringify_number),
]


class ListParams(BaseModel):
    order: SortOrder = SortOrder.ASC
    page: int = Field(1, ge=1)
    limit: int = Field(25, ge=1)

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DSC


class SearchParams(ListParams):
    query: RequiredText


class ItemRef(BaseModel):
    id: int
