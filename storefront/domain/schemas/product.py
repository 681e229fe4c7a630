"""Pydantic schemas for catalog search and per-user lists."""

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from storefront.domain.schemas.common import ItemRef, SearchParams


class ProductSearch(SearchParams):
    brand_id: Optional[int] = None
    category_id: Optional[int] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = None

    @model_validator(mode="after")
    def check_price_range(self) -> "ProductSearch":
        if self.max_price is not None and self.max_price < (self.min_price or 0):
            raise ValueError("max_price must be at least min_price")
        return self


class ListAdd(ItemRef):
    quantity: int = Field(1, ge=1)


class ListUpdate(ItemRef):
    quantity: int = Field(ge=0)


class PriceDetails(BaseModel):
    quantity: int = 0
    retail_price: float = 0.0
    current_price: float = 0.0

    @property
    def savings(self) -> float:
        return round(self.retail_price - self.current_price, 2)
