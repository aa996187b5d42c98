"""Build aggregate shared by the loadout engine and the ledger."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Tuple

from shipbuild.domain.defs import ShipDef, UpgradeDef
from shipbuild.domain.slots import SlotRegistry
from shipbuild.domain.xp_item import XpItem

if TYPE_CHECKING:
    from shipbuild.services.loadout_service import LoadoutService


@dataclass(slots=True)
class CurrentShip:
    """The ship a build flies, with its starting upgrades resolved."""

    ship: ShipDef
    starting_upgrades: Tuple[UpgradeDef, ...] = ()

    @property
    def name(self) -> str:
        return self.ship.name

    @property
    def size(self) -> str:
        return self.ship.size


@dataclass
class Build:
    """One pilot's campaign build."""

    current_ship: CurrentShip
    pilot_skill: int
    upgrade_slots: SlotRegistry
    upgrades: "LoadoutService | None" = None
    xp_items: List[XpItem] = field(default_factory=list)
