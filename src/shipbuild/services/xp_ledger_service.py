"""Valuation, labelling and history export for XP ledger items."""
from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Sequence, Union

from shipbuild.core.types import ELITE_SLOT
from shipbuild.data.repositories import (
    MissionsRepository,
    PilotsRepository,
    ShipsRepository,
    UpgradesRepository,
)
from shipbuild.domain.xp_item import ExportEntry, XpItem

logger = logging.getLogger(__name__)

SHIP_CHANGE_COST = -5
UNKNOWN_NAME = "Unknown"


class XpLedgerService:
    """Prices and describes build history using the card catalog."""

    def __init__(
        self,
        *,
        ships_repo: ShipsRepository,
        upgrades_repo: UpgradesRepository,
        pilots_repo: PilotsRepository,
        missions_repo: MissionsRepository,
    ) -> None:
        self._ships_repo = ships_repo
        self._upgrades_repo = upgrades_repo
        self._pilots_repo = pilots_repo
        self._missions_repo = missions_repo

    def cost(self, item: XpItem) -> int:
        """Return the XP change for an item; spending is negative."""
        item_type = item.item_type
        if item_type == "ship":
            return SHIP_CHANGE_COST
        if item_type == "starting_ship":
            ship = self._ships_repo.find(item.value)
            return ship.starting_xp if ship else 0
        if item_type == "pilot_skill":
            # Each skill level costs double the level being bought.
            return int(item.value) * -2
        if item_type == "xp":
            return int(item.value)
        if item_type == "buy_upgrade":
            upgrade = self._upgrades_repo.find(item.value)
            if upgrade is None or upgrade.points == 0:
                return 0
            if upgrade.slot == ELITE_SLOT:
                return upgrade.points * -2
            return upgrade.points * -1
        if item_type == "buy_pilot_ability":
            pilot = self._pilots_repo.find(item.value)
            return pilot.skill * -1 if pilot else 0
        return 0

    def label(self, item: XpItem) -> str:
        item_type = item.item_type
        if item_type == "ship":
            return f"Change ship: {self._ship_name(item.value)}"
        if item_type == "starting_ship":
            return f"Starting ship: {self._ship_name(item.value)}"
        if item_type == "pilot_skill":
            return f"Upgrade pilot skill: PS {item.value}"
        if item_type == "mission":
            mission = self._missions_repo.find(item.value)
            return f"Completed mission: {mission.name if mission else UNKNOWN_NAME}"
        if item_type == "xp":
            return "Gain XP"
        if item_type == "buy_upgrade":
            upgrade = self._upgrades_repo.find(item.value)
            if upgrade is None:
                return f"Upgrade: {UNKNOWN_NAME}"
            return f"{upgrade.slot}: {upgrade.display_name}"
        if item_type == "buy_pilot_ability":
            return f"Pilot Ability: {self._pilot_name(item.value)}"
        if item_type == "lose_upgrade":
            upgrade = self._upgrades_repo.find(item.value)
            return f"Lose upgrade: {upgrade.display_name if upgrade else UNKNOWN_NAME}"
        if item_type == "lose_pilot_ability":
            return f"Lose pilot ability: {self._pilot_name(item.value)}"
        return ""

    def total(self, items: Iterable[XpItem]) -> int:
        """Return the XP left after applying every item in order."""
        return sum(self.cost(item) for item in items)

    @staticmethod
    def export_history(items: Sequence[XpItem]) -> List[ExportEntry]:
        return [item.export_string() for item in items]

    @staticmethod
    def import_history(entries: Iterable[Union[Mapping[str, object], str]]) -> List[XpItem]:
        """Parse export pairs, accepting legacy ``KEY=value`` strings as well."""
        items: List[XpItem] = []
        for entry in entries:
            if isinstance(entry, str):
                item = XpItem.parse_legacy_export_string(entry)
            else:
                item = XpItem.parse_export_string(entry)
            if item.is_unknown:
                logger.warning("Unrecognised ledger entry %r", entry)
            items.append(item)
        return items

    def _ship_name(self, ship_id: object) -> str:
        ship = self._ships_repo.find(ship_id) if isinstance(ship_id, str) else None
        return ship.name if ship else UNKNOWN_NAME

    def _pilot_name(self, pilot_id: object) -> str:
        pilot = self._pilots_repo.find(pilot_id)
        return pilot.name if pilot else UNKNOWN_NAME
