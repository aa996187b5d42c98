"""Creating builds and changing their ship or pilot skill."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Sequence, Tuple

from shipbuild.core import events
from shipbuild.core.events import EventBus
from shipbuild.data.repositories import PilotsRepository, ShipsRepository, UpgradesRepository
from shipbuild.domain.build import Build, CurrentShip
from shipbuild.domain.defs import ShipDef, UpgradeDef
from shipbuild.domain.slots import SlotRegistry
from shipbuild.services.errors import BuildError
from shipbuild.services.loadout_service import LoadoutService

logger = logging.getLogger(__name__)


class BuildService:
    """Wires a build to its slot registry and loadout engine."""

    def __init__(
        self,
        *,
        ships_repo: ShipsRepository,
        upgrades_repo: UpgradesRepository,
        pilots_repo: PilotsRepository,
        event_bus: EventBus,
    ) -> None:
        self._ships_repo = ships_repo
        self._upgrades_repo = upgrades_repo
        self._pilots_repo = pilots_repo
        self._event_bus = event_bus

    def create_build(
        self,
        ship_id: str,
        pilot_skill: int,
        *,
        upgrade_ids: Iterable[int] = (),
        equipped_upgrade_ids: Sequence[int] | None = None,
        pilot_ids: Iterable[int] = (),
        equipped_ability_ids: Iterable[int] = (),
    ) -> Build:
        """Create a build; starting upgrades are equipped unless an equipped list is given."""
        self._require_skill(pilot_skill)
        current_ship = self._current_ship(ship_id)
        build = Build(
            current_ship=current_ship,
            pilot_skill=pilot_skill,
            upgrade_slots=SlotRegistry.for_ship(
                current_ship.ship, current_ship.starting_upgrades, pilot_skill
            ),
        )
        if equipped_upgrade_ids is None:
            equipped_upgrade_ids = [upgrade.id for upgrade in current_ship.starting_upgrades]
        build.upgrades = LoadoutService(
            build,
            upgrades_repo=self._upgrades_repo,
            pilots_repo=self._pilots_repo,
            event_bus=self._event_bus,
            upgrade_ids=upgrade_ids,
            equipped_upgrade_ids=equipped_upgrade_ids,
            pilot_ids=pilot_ids,
            equipped_ability_ids=equipped_ability_ids,
        )
        logger.info("Created build on %s at PS %d", current_ship.name, pilot_skill)
        return build

    def change_ship(self, build: Build, ship_id: str) -> None:
        """Move the build to another ship, keeping purchases and equipping its starting upgrades."""
        loadout = self._require_loadout(build)
        current_ship = self._current_ship(ship_id)
        build.current_ship = current_ship
        build.upgrade_slots = SlotRegistry.for_ship(
            current_ship.ship, current_ship.starting_upgrades, build.pilot_skill
        )
        loadout.equipped_upgrades.extend(current_ship.starting_upgrades)
        loadout.refresh_upgrades_state()
        logger.info("Build changed ship to %s", current_ship.name)
        self._event_bus.announce(events.CURRENT_SHIP_UPDATE, build)

    def set_pilot_skill(self, build: Build, pilot_skill: int) -> None:
        self._require_skill(pilot_skill)
        loadout = self._require_loadout(build)
        build.pilot_skill = pilot_skill
        # Slot enablement depends on pilot skill.
        build.upgrade_slots = SlotRegistry.for_ship(
            build.current_ship.ship, build.current_ship.starting_upgrades, pilot_skill
        )
        loadout.refresh_upgrades_state()
        self._event_bus.announce(events.PILOT_SKILL_UPDATE, build)

    def _current_ship(self, ship_id: str) -> CurrentShip:
        try:
            ship = self._ships_repo.get(ship_id)
        except KeyError as exc:
            raise BuildError(f"Ship '{ship_id}' not found.") from exc
        return CurrentShip(ship=ship, starting_upgrades=self._starting_upgrades(ship))

    def _starting_upgrades(self, ship: ShipDef) -> Tuple[UpgradeDef, ...]:
        upgrades = []
        for upgrade_id in ship.starting_upgrades:
            try:
                upgrade = self._upgrades_repo.get(upgrade_id)
            except KeyError as exc:
                raise BuildError(
                    f"Starting upgrade '{upgrade_id}' for ship '{ship.id}' not found."
                ) from exc
            # Free slots accept only this instance, never a bought copy of the card.
            upgrades.append(replace(upgrade))
        return tuple(upgrades)

    @staticmethod
    def _require_loadout(build: Build) -> LoadoutService:
        if build.upgrades is None:
            raise BuildError("Build has no loadout attached.")
        return build.upgrades

    @staticmethod
    def _require_skill(pilot_skill: int) -> None:
        if pilot_skill < 0:
            raise BuildError("Pilot skill must be zero or higher.")
