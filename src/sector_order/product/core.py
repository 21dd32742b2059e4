from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from sector_order.errors import InvalidSectorError

# Two-digit sector prefix in the packed order
MAX_SECTORS = 99


@dataclass(frozen=True)
class Sector:
    """A display category bucket (e.g. GRL / General)."""

    code: str
    name: str

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("Sector code cannot be empty")


@dataclass(frozen=True)
class Product:
    """
    Represents a catalog product as seen by the ordering engine.

    Only `order` matters for positioning; the remaining fields ride along
    so that updated copies keep the rest of the record intact.
    """

    id: str
    name: str
    order: int

    sku: str = ""
    provider_id: str = ""
    enabled: bool = True

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Product ID cannot be empty")
        if self.order < 0:
            raise ValueError(f"Product {self.id} has negative order {self.order}")


class SectorCatalog:
    """
    Immutable, ordered list of sectors.

    A sector's identity for ordering is its 1-based position in the
    catalog, not its code.
    """

    def __init__(self, sectors: Iterable[Sector]) -> None:
        self._sectors: tuple[Sector, ...] = tuple(sectors)
        if not self._sectors:
            raise ValueError("Sector catalog cannot be empty")
        if len(self._sectors) > MAX_SECTORS:
            raise ValueError(
                f"Sector catalog holds {len(self._sectors)} sectors, "
                f"max is {MAX_SECTORS}"
            )

        self._code_to_idx: dict[str, int] = {}
        for i, sector in enumerate(self._sectors, start=1):
            if sector.code in self._code_to_idx:
                raise ValueError(f"Sector {sector.code} already exists")
            self._code_to_idx[sector.code] = i

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, str]]) -> SectorCatalog:
        return cls(Sector(code, name) for code, name in pairs)

    def __len__(self) -> int:
        return len(self._sectors)

    def __iter__(self) -> Iterator[Sector]:
        return iter(self._sectors)

    def __contains__(self, code: object) -> bool:
        return code in self._code_to_idx

    def __repr__(self) -> str:
        return f"SectorCatalog({list(self.codes)!r})"

    @property
    def codes(self) -> tuple[str, ...]:
        return tuple(s.code for s in self._sectors)

    @property
    def first(self) -> Sector:
        return self._sectors[0]

    def index_of(self, code: str) -> int:
        """1-based catalog position of a sector code."""
        try:
            return self._code_to_idx[code]
        except KeyError:
            raise InvalidSectorError(code) from None

    def code_at(self, index: int) -> str | None:
        """Sector code at a 1-based position, or None when out of range."""
        if 1 <= index <= len(self._sectors):
            return self._sectors[index - 1].code
        return None

    def get(self, code: str) -> Sector:
        return self._sectors[self.index_of(code) - 1]
