"""Error hierarchy for the ordering engine.

Every error carries a stable ``code`` so the application layer can map it
to a localized message (see ``sector_order.config.loader.load_messages``).
"""

from __future__ import annotations

from collections.abc import Sequence


class OrderingError(Exception):
    """Base class for all ordering failures."""

    code = "ORDERING_ERROR"


class InvalidSectorError(OrderingError):
    """Sector code (or decoded sector index) not present in the catalog."""

    code = "INVALID_SECTOR"

    def __init__(self, sector: object) -> None:
        self.sector = sector
        super().__init__(f"Unknown sector: {sector!r}")


class OutOfRangeError(OrderingError):
    """Sequence, position or order value outside its valid bounds."""

    code = "OUT_OF_RANGE"

    def __init__(self, value: int, low: int, high: int, what: str = "sequence") -> None:
        self.value = value
        self.low = low
        self.high = high
        self.what = what
        super().__init__(f"{what} {value} outside [{low}, {high}]")


class CrossSectorSwapError(OrderingError):
    code = "CROSS_SECTOR_SWAP"

    def __init__(self, product_id1: str, sector1: str, product_id2: str, sector2: str) -> None:
        self.product_ids = (product_id1, product_id2)
        self.sectors = (sector1, sector2)
        super().__init__(
            f"Cannot swap {product_id1} ({sector1}) with {product_id2} ({sector2}): "
            "products belong to different sectors"
        )


class InconsistentStateError(OrderingError):
    """
    Duplicate or gapped sequences detected in a sector.

    Signals corrupted input data or an engine defect rather than a normal
    input-validation failure.
    """

    code = "INCONSISTENT_STATE"

    def __init__(self, sector_code: str | None, issues: Sequence[str]) -> None:
        self.sector_code = sector_code
        self.issues = list(issues)
        where = f"sector {sector_code}" if sector_code else "product collection"
        super().__init__(f"Inconsistent ordering in {where}: {'; '.join(self.issues)}")


class ProductNotFoundError(OrderingError, KeyError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")

    def __str__(self) -> str:
        return f"Product {self.product_id} not found"


class StaleRevisionError(OrderingError):
    """Store changed between fetch and commit; nothing was written."""

    code = "STALE_REVISION"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Store revision is {actual}, batch was computed at {expected}")


class ValidationError(OrderingError):
    """
    Describes why a single order value is invalid.

    Returned (not raised) by ``OrderValidator.validate_value``.
    """

    def __init__(self, message: str, field: str = "order", code: str = "INVALID_ORDER") -> None:
        self.field = field
        self.code = code
        super().__init__(message)
