"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between callers, the Service layer, the
repositories and the cache.  DTOs are immutable (``frozen=True``), so a
snapshot handed out by the cache can never be mutated in place.

- ``CreateProductDTO``: input for product creation.
- ``UpdatePriceDTO``: input for a price change with optional version guard.
- ``ProductRecord``: the full product image (store row / cache snapshot).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from modules.products.exceptions import InvalidProductInput

if TYPE_CHECKING:
    from modules.products.models import Product

PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2
PRICE_QUANTUM = Decimal(1).scaleb(-PRICE_DECIMAL_PLACES)
PRICE_LIMIT = Decimal(10) ** (PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES)
NAME_MAX_LENGTH = 255

_DTO = TypeVar("_DTO", bound=BaseModel)


def _validate_price(v: Decimal) -> Decimal:
    if v < 0:
        raise ValueError("Price must be 0 or higher.")
    if v >= PRICE_LIMIT:
        raise ValueError(f"Price must be less than {PRICE_LIMIT}.")
    if v.quantize(PRICE_QUANTUM) != v:
        raise ValueError("Price must have at most 2 decimal places.")
    return v.quantize(PRICE_QUANTUM)


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` is a non-blank string (stripped).
    - ``price`` is a non-negative Decimal below ``PRICE_LIMIT`` with at most
      2 decimal places (fits the ``products.price`` column).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(max_length=NAME_MAX_LENGTH)
    price: Decimal

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Product name must not be blank.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        return _validate_price(v)


class UpdatePriceDTO(BaseModel):
    """Immutable DTO for price updates.

    ``expected_version=None`` means "update unconditionally".
    """

    model_config = ConfigDict(frozen=True)

    price: Decimal
    expected_version: int | None = Field(default=None, ge=0)

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        return _validate_price(v)


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


class ProductRecord(BaseModel):
    """Immutable product image exchanged between store, cache and service."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    price: Decimal
    version: int = Field(ge=0)
    deleted: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> ProductRecord:
        """Build a record from a Product model instance."""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            version=product.version,
            deleted=product.deleted,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def with_price(self, price: Decimal, updated_at: datetime) -> ProductRecord:
        """Return the next version of this record carrying ``price``."""
        return self.model_copy(
            update={
                "price": price,
                "version": self.version + 1,
                "updated_at": updated_at,
            }
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_dto(dto_cls: type[_DTO], **data: Any) -> _DTO:
    """Construct ``dto_cls``, reporting validation errors as ``InvalidProductInput``."""
    try:
        return dto_cls(**data)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise InvalidProductInput(f"{field}: {error['msg']}") from exc
