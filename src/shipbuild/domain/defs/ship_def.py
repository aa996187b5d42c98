"""Ship definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from shipbuild.core.types import ShipSize


@dataclass(slots=True, frozen=True)
class ShipSlotDef:
    """Upgrade slot printed on a ship, enabled from ``min_skill`` upwards."""

    type: str
    min_skill: int = 0


@dataclass(slots=True)
class ShipDef:
    id: str
    name: str
    size: ShipSize
    starting_xp: int
    upgrade_slots: Tuple[ShipSlotDef, ...] = ()
    starting_upgrades: Tuple[int, ...] = ()
