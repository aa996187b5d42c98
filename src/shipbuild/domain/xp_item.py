"""Build-history ledger entries and their compact export form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Mapping, Tuple

XpItemType = Literal[
    "ship",
    "starting_ship",
    "pilot_skill",
    "mission",
    "xp",
    "buy_upgrade",
    "buy_pilot_ability",
    "lose_upgrade",
    "lose_pilot_ability",
    "unknown",
]

ExportEntry = Dict[str, object]

EXPORT_KEYS: Dict[XpItemType, str] = {
    "ship": "ST",
    "starting_ship": "SST",
    "pilot_skill": "PS",
    "mission": "MIS",
    "xp": "XP",
    "buy_upgrade": "UP",
    "buy_pilot_ability": "PA",
    "lose_upgrade": "LUP",
    "lose_pilot_ability": "LPA",
}
_TYPES_BY_KEY: Dict[str, XpItemType] = {key: item_type for item_type, key in EXPORT_KEYS.items()}

# Ship ids are strings; every other payload is an integer.
_STRING_PAYLOAD_TYPES: Tuple[XpItemType, ...] = ("ship", "starting_ship")


@dataclass(slots=True, frozen=True)
class XpItem:
    """One recorded build event.

    ``value`` is the ship id for ship events, the new skill level for
    ``pilot_skill``, the amount for ``xp`` and a catalog id otherwise.
    """

    item_type: XpItemType
    value: int | str | None = None

    def __post_init__(self) -> None:
        if self.item_type == "unknown":
            if self.value is not None:
                raise ValueError("Unknown ledger items carry no value.")
            return
        if self.item_type not in EXPORT_KEYS:
            raise ValueError(f"Unknown ledger item type: {self.item_type!r}")
        if self.item_type in _STRING_PAYLOAD_TYPES:
            if not isinstance(self.value, str):
                raise ValueError(f"{self.item_type} items require a ship id string.")
        elif isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"{self.item_type} items require an integer value.")

    @classmethod
    def unknown(cls) -> "XpItem":
        return cls(item_type="unknown")

    @property
    def is_unknown(self) -> bool:
        return self.item_type == "unknown"

    def export_string(self) -> ExportEntry:
        """Return the ``{"key", "value"}`` pair used in shared build strings."""
        if self.is_unknown:
            return {"key": "", "value": ""}
        return {"key": EXPORT_KEYS[self.item_type], "value": self.value}

    @classmethod
    def parse_export_string(cls, entry: Mapping[str, object]) -> "XpItem":
        """Rebuild an item from an export pair; unrecognised input yields ``unknown``."""
        key = entry.get("key")
        item_type = _TYPES_BY_KEY.get(key) if isinstance(key, str) else None
        if item_type is None:
            return cls.unknown()
        raw_value = entry.get("value")
        if item_type in _STRING_PAYLOAD_TYPES:
            if raw_value is None:
                return cls.unknown()
            return cls(item_type=item_type, value=str(raw_value))
        value = _parse_int(raw_value)
        if value is None:
            return cls.unknown()
        return cls(item_type=item_type, value=value)

    @classmethod
    def parse_legacy_export_string(cls, export: str) -> "XpItem":
        """Parse the older flat ``KEY=value`` form."""
        parts = export.split("=")
        return cls.parse_export_string(
            {"key": parts[0], "value": parts[1] if len(parts) > 1 else None}
        )


def _parse_int(raw_value: object) -> int | None:
    if isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, int):
        return raw_value
    if isinstance(raw_value, str):
        try:
            return int(raw_value.strip(), 10)
        except ValueError:
            return None
    return None


__all__ = ["EXPORT_KEYS", "ExportEntry", "XpItem", "XpItemType"]
