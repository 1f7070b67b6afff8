"""Single visibility rule for product read paths.

Every active read (cache hit, store read, in-memory listing) goes through
``is_visible`` so a soft-deleted product can never leak through one call
site that forgot the check.  The Django store expresses the same rule as
``Product.objects.alive()``.
"""

from __future__ import annotations

from typing import Optional

from modules.products.dtos import ProductRecord


def is_visible(record: Optional[ProductRecord]) -> bool:
    """Return ``True`` when ``record`` exists and is not soft-deleted."""
    return record is not None and not record.deleted
