"""Product model with version stamp and soft delete.

Business rules implemented:
- Price is a fixed-point decimal and is never negative (DTO validation
  + DB check constraint), with at most 12 digits, 2 of them decimal.
- ``version`` starts at 0 and moves by exactly one per accepted mutation
  (inherited from VersionedSoftDeleteModel).
- Soft delete via the ``deleted`` flag; rows are never physically erased
  by the service.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import VersionedSoftDeleteModel
from modules.products.dtos import PRICE_DECIMAL_PLACES, PRICE_MAX_DIGITS

logger = structlog.get_logger(__name__)


class Product(VersionedSoftDeleteModel):
    """Product row backing ``ProductDjangoRepository``."""

    name = models.CharField(max_length=255)
    price = models.DecimalField(
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    class Meta:
        db_table = "products"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["deleted", "name"], name="products_deleted_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_row_inserted",
                product_id=str(self.id),
                name=self.name,
            )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.name} (v{self.version})"
