import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sector_order.errors import OrderingError
from sector_order.product.core import Sector, SectorCatalog

DEFAULT_LOCALE = "es"


@dataclass(frozen=True)
class OrderingConfig:
    """Engine tunables read from the ``ordering`` section."""

    strict_sector_decode: bool = False
    max_sequence: int = 999


def _load_document(config_path: str | Path | None) -> dict[str, Any]:
    """
    Loads the sector catalog document.
    If no path is provided, looks for sector_catalog.json in the config directory.
    """
    if config_path is None:
        # Default to the file next to this script
        final_path = Path(__file__).parent / "sector_catalog.json"
    else:
        final_path = Path(config_path)

    with open(final_path, encoding="utf-8") as f:
        data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict from {final_path}, got {type(data)}")
        return data


def load_sector_catalog(config_path: str | Path | None = None) -> SectorCatalog:
    """Builds the immutable sector catalog from the ``sectors`` list."""
    data = _load_document(config_path)
    entries = data.get("sectors")
    if not isinstance(entries, list):
        raise TypeError(f"Expected 'sectors' list, got {type(entries)}")
    return SectorCatalog(Sector(code=e["code"], name=e["name"]) for e in entries)


def load_ordering_config(config_path: str | Path | None = None) -> OrderingConfig:
    data = _load_document(config_path)
    section = data.get("ordering", {})
    return OrderingConfig(
        strict_sector_decode=bool(section.get("strict_sector_decode", False)),
        max_sequence=int(section.get("max_sequence", 999)),
    )


def load_messages(config_path: str | Path | None = None) -> dict[str, dict[str, str]]:
    """Returns locale -> error code -> message tables."""
    data = _load_document(config_path)
    messages = data.get("messages", {})
    if not isinstance(messages, dict):
        raise TypeError(f"Expected 'messages' dict, got {type(messages)}")
    return messages


def localized_message(
    error: OrderingError,
    locale: str = DEFAULT_LOCALE,
    messages: dict[str, dict[str, str]] | None = None,
) -> str:
    """
    Maps an ordering error to the user-facing message for a locale.

    The error's own code is looked up in the requested locale, then in the
    default locale; only then the generic ordering message (same order),
    then the exception text itself.
    """
    tables = messages if messages is not None else load_messages()
    candidates = [tables.get(locale, {}), tables.get(DEFAULT_LOCALE, {})]
    for code in (error.code, OrderingError.code):
        for table in candidates:
            if table.get(code):
                return table[code]
    return str(error)
