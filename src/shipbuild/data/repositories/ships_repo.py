"""Ships repository with reference validation."""
from __future__ import annotations

from typing import Dict, List, Tuple

from shipbuild.data.errors import DataReferenceError, DataValidationError
from shipbuild.data.repositories.base import RepositoryBase
from shipbuild.data.repositories.upgrades_repo import UpgradesRepository
from shipbuild.domain.defs import ShipDef, ShipSlotDef

_SHIP_SIZES = ("small", "large")


class ShipsRepository(RepositoryBase[str, ShipDef]):
    """Loads ships and ensures their starting upgrades exist."""

    def __init__(self, upgrades_repo: UpgradesRepository | None = None, base_path=None) -> None:
        super().__init__("ships.json", base_path)
        self._upgrades_repo = upgrades_repo or UpgradesRepository(base_path=base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, ShipDef]:
        upgrade_ids = {upgrade.id for upgrade in self._upgrades_repo.all()}

        ships: Dict[str, ShipDef] = {}
        for raw_id, payload in raw.items():
            context = f"ship '{raw_id}'"
            data = self._require_mapping(payload, context)
            self._assert_exact_fields(
                data,
                {"name", "size", "starting_xp", "upgrade_slots"},
                context,
                optional_fields={"starting_upgrades"},
            )
            size = self._require_str(data["size"], f"{context} size")
            if size not in _SHIP_SIZES:
                raise DataValidationError(f"{context} size must be one of {list(_SHIP_SIZES)}.")
            starting_upgrades = self._parse_starting_upgrades(data.get("starting_upgrades", []), context)
            for upgrade_id in starting_upgrades:
                if upgrade_id not in upgrade_ids:
                    raise DataReferenceError(f"{context} references missing upgrade '{upgrade_id}'.")
            ships[raw_id] = ShipDef(
                id=raw_id,
                name=self._require_str(data["name"], f"{context} name"),
                size=size,
                starting_xp=self._require_int(data["starting_xp"], f"{context} starting_xp"),
                upgrade_slots=self._parse_slots(data["upgrade_slots"], context),
                starting_upgrades=starting_upgrades,
            )
        return ships

    def _parse_slots(self, raw_slots: object, context: str) -> Tuple[ShipSlotDef, ...]:
        if not isinstance(raw_slots, list):
            raise DataValidationError(f"{context} upgrade_slots must be a list.")
        slots: List[ShipSlotDef] = []
        for index, entry in enumerate(raw_slots):
            slot_context = f"{context} upgrade_slots[{index}]"
            # A bare string is a slot open from the start.
            if isinstance(entry, str):
                slots.append(ShipSlotDef(type=entry))
                continue
            slot_data = self._require_mapping(entry, slot_context)
            self._assert_exact_fields(slot_data, {"type"}, slot_context, optional_fields={"min_skill"})
            slots.append(
                ShipSlotDef(
                    type=self._require_str(slot_data["type"], f"{slot_context} type"),
                    min_skill=self._require_int(slot_data.get("min_skill", 0), f"{slot_context} min_skill"),
                )
            )
        return tuple(slots)

    def _parse_starting_upgrades(self, raw_value: object, context: str) -> Tuple[int, ...]:
        if not isinstance(raw_value, list):
            raise DataValidationError(f"{context} starting_upgrades must be a list.")
        return tuple(
            self._require_int(entry, f"{context} starting_upgrades entries") for entry in raw_value
        )
