"""Product domain exceptions.

Raised by the repositories and the Service Layer.  Whatever front end
calls the service (HTTP, CLI, a worker) catches these and translates
them into its own error format.

``InvalidProductInput``, ``ProductNotFound`` and ``ProductVersionConflict``
are expected, caller-recoverable conditions.  ``StorageFailure`` wraps any
other fault of the backing store and is never interpreted by the core.
"""

from __future__ import annotations

from uuid import UUID


class ProductError(Exception):
    """Base class for every error raised by the product core."""


class InvalidProductInput(ProductError):
    """Malformed arguments (negative price, blank name, bad version)."""


class ProductNotFound(ProductError):
    """The requested product does not exist or has been soft-deleted."""


class ProductVersionConflict(ProductError):
    """The caller's view of the product version is stale.

    The caller must re-read the product and retry with the current version.
    """

    def __init__(
        self,
        product_id: UUID | str,
        expected_version: int,
        current_version: int,
    ) -> None:
        self.product_id = product_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Your version of product with id={product_id} is outdated. "
            f"Your version: {expected_version}. "
            f"Current version: {current_version}."
        )


class StorageFailure(ProductError):
    """The backing store failed for a reason the core does not interpret."""
