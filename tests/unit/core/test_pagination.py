"""Unit tests for PageSpec and Page."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.core.pagination import MAX_PAGE_SIZE, Page, PageSpec

pytestmark = pytest.mark.unit


class TestPageSpec:
    def test_defaults(self, settings):
        settings.DEFAULT_PAGE_SIZE = 10
        spec = PageSpec()
        assert spec.sort_by == "id"
        assert spec.direction == "asc"
        assert spec.offset == 0
        assert spec.limit == 10

    def test_direction_is_case_insensitive(self):
        spec = PageSpec(direction="DESC")
        assert spec.direction == "desc"
        assert spec.descending is True

    def test_unknown_sort_field_raises(self):
        with pytest.raises(ValidationError):
            PageSpec(sort_by="stock_quantity")

    def test_unknown_direction_raises(self):
        with pytest.raises(ValidationError):
            PageSpec(direction="sideways")

    def test_negative_offset_raises(self):
        with pytest.raises(ValidationError):
            PageSpec(offset=-1)

    @pytest.mark.parametrize("limit", [0, MAX_PAGE_SIZE + 1])
    def test_limit_out_of_range_raises(self, limit):
        with pytest.raises(ValidationError):
            PageSpec(limit=limit)

    def test_of_maps_page_number_to_offset(self):
        spec = PageSpec.of(page=2, size=5, sort_by="price", direction="desc")
        assert spec.offset == 10
        assert spec.limit == 5
        assert spec.sort_by == "price"
        assert spec.descending is True

    def test_of_rejects_negative_page(self):
        with pytest.raises(ValueError):
            PageSpec.of(page=-1, size=5)

    def test_is_immutable(self):
        spec = PageSpec()
        with pytest.raises(ValidationError):
            spec.offset = 3


class TestPage:
    def test_navigation_properties(self):
        page = Page[int](items=[5, 6], total=7, offset=4, limit=2)
        assert page.page_number == 2
        assert page.total_pages == 4
        assert page.has_next is True

    def test_last_page_has_no_next(self):
        page = Page[int](items=[7], total=7, offset=6, limit=2)
        assert page.has_next is False

    def test_empty_result(self):
        page = Page[int](items=[], total=0, offset=0, limit=10)
        assert page.total_pages == 0
        assert page.has_next is False
