"""Unit tests for Product DTOs.

Covers:
- CreateProductDTO: validation, name stripping, price quantization, frozen.
- UpdatePriceDTO: optional version guard, validation.
- ProductRecord: from_entity factory, with_price.
- build_dto: pydantic errors surface as InvalidProductInput.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.products.dtos import (
    CreateProductDTO,
    ProductRecord,
    UpdatePriceDTO,
    build_dto,
)
from modules.products.exceptions import InvalidProductInput
from modules.products.models import Product

pytestmark = pytest.mark.unit

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(**overrides) -> ProductRecord:
    defaults = {
        "id": uuid4(),
        "name": "Widget",
        "price": Decimal("10.00"),
        "version": 0,
        "created_at": NOW,
        "updated_at": NOW,
    }
    defaults.update(overrides)
    return ProductRecord(**defaults)


# ===========================================================================
# CreateProductDTO
# ===========================================================================


class TestCreateProductDTOValid:
    def test_create_with_valid_data(self):
        dto = CreateProductDTO(name="Widget", price=Decimal("19.99"))
        assert dto.name == "Widget"
        assert dto.price == Decimal("19.99")

    def test_zero_price_is_allowed(self):
        dto = CreateProductDTO(name="Savings Account", price=Decimal("0"))
        assert dto.price == Decimal("0.00")

    def test_name_is_stripped(self):
        dto = CreateProductDTO(name="  Widget  ", price=Decimal("1.00"))
        assert dto.name == "Widget"

    def test_price_quantized_to_cents(self):
        dto = CreateProductDTO(name="Widget", price="12.5")
        assert dto.price == Decimal("12.50")
        assert str(dto.price) == "12.50"


class TestCreateProductDTOValidation:
    def test_negative_price_raises(self):
        with pytest.raises(ValidationError, match="Price must be 0 or higher"):
            CreateProductDTO(name="Widget", price=Decimal("-0.01"))

    def test_sub_cent_price_raises(self):
        with pytest.raises(ValidationError, match="at most 2 decimal places"):
            CreateProductDTO(name="Widget", price=Decimal("1.005"))

    def test_blank_name_raises(self):
        with pytest.raises(ValidationError, match="must not be blank"):
            CreateProductDTO(name="   ", price=Decimal("1.00"))

    def test_empty_name_raises(self):
        with pytest.raises(ValidationError, match="must not be blank"):
            CreateProductDTO(name="", price=Decimal("1.00"))

    def test_too_long_name_raises(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="x" * 256, price=Decimal("1.00"))

    def test_non_numeric_price_raises(self):
        with pytest.raises(ValidationError):
            CreateProductDTO(name="Widget", price="ten")

    def test_price_beyond_column_width_raises(self):
        with pytest.raises(ValidationError, match="Price must be less than 10000000000"):
            CreateProductDTO(name="Widget", price=Decimal("10000000000.00"))

    def test_largest_storable_price_is_allowed(self):
        dto = CreateProductDTO(name="Widget", price=Decimal("9999999999.99"))
        assert dto.price == Decimal("9999999999.99")


class TestCreateProductDTOFrozen:
    def test_is_immutable(self):
        dto = CreateProductDTO(name="Widget", price=Decimal("10.00"))
        with pytest.raises(ValidationError):
            dto.name = "Changed"


# ===========================================================================
# UpdatePriceDTO
# ===========================================================================


class TestUpdatePriceDTO:
    def test_expected_version_defaults_to_none(self):
        dto = UpdatePriceDTO(price=Decimal("12.50"))
        assert dto.expected_version is None

    def test_expected_version_can_be_set(self):
        dto = UpdatePriceDTO(price=Decimal("12.50"), expected_version=3)
        assert dto.expected_version == 3

    def test_negative_price_raises(self):
        with pytest.raises(ValidationError, match="Price must be 0 or higher"):
            UpdatePriceDTO(price=Decimal("-1.00"))

    def test_price_beyond_column_width_raises(self):
        with pytest.raises(ValidationError, match="Price must be less than"):
            UpdatePriceDTO(price=Decimal("12345678901.00"), expected_version=0)

    def test_negative_expected_version_raises(self):
        with pytest.raises(ValidationError):
            UpdatePriceDTO(price=Decimal("1.00"), expected_version=-1)


# ===========================================================================
# ProductRecord
# ===========================================================================


class TestProductRecord:
    def test_from_entity(self):
        product = Product.objects.create(name="Output Widget", price=Decimal("19.99"))
        record = ProductRecord.from_entity(product)
        assert record.id == product.id
        assert record.name == "Output Widget"
        assert record.price == Decimal("19.99")
        assert record.version == 0
        assert record.deleted is False
        assert record.created_at == product.created_at
        assert record.updated_at == product.updated_at

    def test_with_price_bumps_version_only_by_one(self):
        record = _record(version=4)
        later = datetime(2026, 1, 2, tzinfo=timezone.utc)

        updated = record.with_price(Decimal("12.50"), later)

        assert updated.version == 5
        assert updated.price == Decimal("12.50")
        assert updated.updated_at == later
        assert updated.id == record.id
        assert updated.name == record.name
        assert updated.created_at == record.created_at

    def test_with_price_leaves_original_untouched(self):
        record = _record()
        record.with_price(Decimal("99.00"), NOW)
        assert record.price == Decimal("10.00")
        assert record.version == 0

    def test_is_immutable(self):
        record = _record()
        with pytest.raises(ValidationError):
            record.price = Decimal("1.00")


# ===========================================================================
# build_dto
# ===========================================================================


class TestBuildDto:
    def test_returns_dto_on_valid_input(self):
        dto = build_dto(CreateProductDTO, name="Widget", price="1.00")
        assert isinstance(dto, CreateProductDTO)

    def test_translates_validation_error(self):
        with pytest.raises(InvalidProductInput, match="price") as exc_info:
            build_dto(CreateProductDTO, name="Widget", price="-5")
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_reports_blank_name(self):
        with pytest.raises(InvalidProductInput, match="must not be blank"):
            build_dto(CreateProductDTO, name=" ", price="1.00")
