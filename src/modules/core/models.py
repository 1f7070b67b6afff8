"""Base abstract models for the catalog service.

Provides:
- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``VersionedSoftDeleteModel``: Extends BaseModel with a ``version`` stamp
  and a ``deleted`` flag for soft deletion.

Design decisions:
- Timestamps are plain ``DateTimeField``s (no ``auto_now``): the store stamps
  both with the same instant on creation and the caller owns ``updated_at``
  on every mutation, so ``created_at == updated_at`` holds for new rows.
- ``deleted`` is a boolean that never reverts; ``version`` is bumped by
  exactly one on every accepted mutation, soft delete included.
- ``objects`` manager returns ALL records (unfiltered).  Use ``.alive()``
  explicitly to exclude soft-deleted rows.
"""

from __future__ import annotations

from datetime import datetime

import uuid6
from django.db import models
from django.db.models import F
from django.utils import timezone

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid6.uuid7,
        editable=False,
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Align ``updated_at`` with ``created_at`` on the first save."""
        if self._state.adding:
            self.updated_at = self.created_at
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Versioned soft delete infrastructure
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers."""

    def alive(self) -> SoftDeleteQuerySet:
        """Return only non-deleted records."""
        return self.filter(deleted=False)

    def soft_delete(self, now: datetime | None = None) -> int:
        """Bulk soft-delete alive rows, bumping each row's version.

        Returns the number of rows that transitioned to deleted.
        """
        now = now or timezone.now()
        return self.alive().update(
            deleted=True,
            version=F("version") + 1,
            updated_at=now,
        )


class SoftDeleteManager(models.Manager):
    """Manager that exposes ``.alive()`` on the queryset."""

    def get_queryset(self) -> SoftDeleteQuerySet:
        return SoftDeleteQuerySet(self.model, using=self._db)

    def alive(self) -> SoftDeleteQuerySet:
        return self.get_queryset().alive()


class VersionedSoftDeleteModel(BaseModel):
    """Abstract model with a version stamp and a ``deleted`` flag.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.alive()`` to exclude soft-deleted rows.
    - Rows are soft-deleted through the repository, via
      ``SoftDeleteQuerySet.soft_delete``.
    """

    version = models.PositiveIntegerField(default=0)
    deleted = models.BooleanField(default=False, db_index=True)

    objects = SoftDeleteManager()

    class Meta:
        abstract = True
