"""Loadout engine: purchased, equipped and disabled upgrades for one build."""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from shipbuild.core import events
from shipbuild.core.events import EventBus
from shipbuild.core.multiset import difference_all, difference_single, intersection_single, remove_first
from shipbuild.core.types import ELITE_SLOT
from shipbuild.data.repositories import PilotsRepository, UpgradesRepository
from shipbuild.domain.build import Build
from shipbuild.domain.defs import PilotDef, UpgradeDef
from shipbuild.domain.slots import Card, Slot

logger = logging.getLogger(__name__)

# Secondary weapons and bombs may be bought more than once.
DUPLICATE_SLOT_TYPES = frozenset({"Bomb", "Torpedo", "Cannon", "Turret", "Missile"})
DUPLICATE_XWS = frozenset({"hullupgrade", "shieldupgrade"})


@dataclass(slots=True)
class _SlotAssignment:
    """Working pools for one slot assignment pass."""

    remaining_upgrades: List[UpgradeDef]
    remaining_abilities: List[PilotDef]
    equipped_upgrades: List[UpgradeDef] = field(default_factory=list)
    equipped_abilities: List[PilotDef] = field(default_factory=list)


class LoadoutService:
    """Own the upgrade and pilot ability lists of a build and keep them legal.

    Purchased and equipped lists are multisets: buying the same card twice
    yields two entries. Equipped lists are re-derived from the purchased ones
    after every mutation, then each mutation is announced on the event bus
    with the build as payload.
    """

    def __init__(
        self,
        build: Build,
        *,
        upgrades_repo: UpgradesRepository,
        pilots_repo: PilotsRepository,
        event_bus: EventBus,
        upgrade_ids: Iterable[int] = (),
        equipped_upgrade_ids: Iterable[int] = (),
        pilot_ids: Iterable[int] = (),
        equipped_ability_ids: Iterable[int] = (),
    ) -> None:
        self.build = build
        self._upgrades_repo = upgrades_repo
        self._pilots_repo = pilots_repo
        self._event_bus = event_bus
        # Upgrades in order of purchase
        self.purchased: List[UpgradeDef] = self._upgrades_from_ids(upgrade_ids)
        self.purchased_abilities: List[PilotDef] = self._abilities_from_ids(pilot_ids)
        self.equipped_upgrades: List[UpgradeDef] = []
        for upgrade_id in equipped_upgrade_ids:
            upgrade = self._upgrade_to_equip(upgrade_id)
            if upgrade is None:
                logger.warning("Skipping unknown upgrade %r", upgrade_id)
                continue
            self.equipped_upgrades.append(upgrade)
        self.equipped_abilities: List[PilotDef] = self._abilities_from_ids(equipped_ability_ids)
        self.all: List[UpgradeDef] = []
        self.disabled: List[UpgradeDef] = []
        self.disabled_abilities: List[PilotDef] = []
        self.unequipped: List[UpgradeDef] = []
        self.unequipped_abilities: List[PilotDef] = []
        self.refresh_upgrades_state()

    # ------------------------------------------------------------------
    # State derivation
    # ------------------------------------------------------------------
    def refresh_upgrades_state(self) -> None:
        self.all = self.purchased + list(self.build.current_ship.starting_upgrades)
        validated_upgrades = self.validate_upgrades(self.equipped_upgrades)
        validated_abilities = self.validate_abilities(self.equipped_abilities)
        self.equipped_upgrades, self.equipped_abilities = self.equip_upgrades_to_slots(
            validated_upgrades, validated_abilities
        )
        # Granted slots only exist once equipping has run.
        self.disabled = self.get_disabled_upgrades()
        self.disabled_abilities = self.get_disabled_abilities()
        self.unequipped = self.get_unequipped_upgrades()
        self.unequipped_abilities = self.get_unequipped_abilities()
        logger.debug(
            "Refreshed loadout: %d equipped, %d unequipped, %d disabled upgrades; "
            "%d equipped, %d unequipped, %d disabled abilities",
            len(self.equipped_upgrades),
            len(self.unequipped),
            len(self.disabled),
            len(self.equipped_abilities),
            len(self.unequipped_abilities),
            len(self.disabled_abilities),
        )

    def validate_upgrades(self, upgrades: Sequence[UpgradeDef]) -> List[UpgradeDef]:
        """Keep upgrades that are owned (purchased or starting) and legal on the ship."""
        owned = intersection_single(upgrades, self.all)
        return [upgrade for upgrade in owned if self.upgrade_allowed_on_ship(upgrade)]

    def validate_abilities(self, abilities: Sequence[PilotDef]) -> List[PilotDef]:
        owned = intersection_single(abilities, self.purchased_abilities)
        return [pilot for pilot in owned if self.ability_allowed_in_build(pilot)]

    def get_disabled_upgrades(self) -> List[UpgradeDef]:
        usable_slot_types = self.build.upgrade_slots.all_usable_slot_types()
        return [
            upgrade
            for upgrade in self.purchased
            if not self.upgrade_allowed_on_ship(upgrade) or upgrade.slot not in usable_slot_types
        ]

    def get_disabled_abilities(self) -> List[PilotDef]:
        # Abilities only go in Elite slots
        elite_usable = ELITE_SLOT in self.build.upgrade_slots.all_usable_slot_types()
        return [
            pilot
            for pilot in self.purchased_abilities
            if not self.ability_allowed_in_build(pilot) or not elite_usable
        ]

    def get_unequipped_upgrades(self) -> List[UpgradeDef]:
        # Every copy of a disabled card goes; one copy per equipped card goes.
        not_disabled = difference_all(self.purchased, self.disabled)
        return difference_single(not_disabled, self.equipped_upgrades)

    def get_unequipped_abilities(self) -> List[PilotDef]:
        not_disabled = difference_all(self.purchased_abilities, self.disabled_abilities)
        return difference_single(not_disabled, self.equipped_abilities)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def buy_card(self, upgrade_id: int) -> None:
        upgrade = self._upgrades_repo.find(upgrade_id)
        if upgrade is None:
            logger.warning("Cannot buy unknown upgrade %r", upgrade_id)
        else:
            self.purchased.append(upgrade)
            logger.info("Bought upgrade %s (%s)", upgrade.id, upgrade.name)
        self._refresh_and_announce(events.UPGRADES_ADD)

    def buy_pilot_ability(self, pilot_id: int) -> None:
        pilot = self._pilots_repo.find(pilot_id)
        if pilot is None:
            logger.warning("Cannot buy unknown pilot ability %r", pilot_id)
        else:
            self.purchased_abilities.append(pilot)
            logger.info("Bought pilot ability %s (%s)", pilot.id, pilot.name)
        self._refresh_and_announce(events.PILOT_ABILITIES_ADD)

    def lose_card(self, upgrade_id: int) -> None:
        """Remove the first purchased copy of an upgrade.

        Refreshes and announces even when no copy was found.
        """
        if _remove_first_with_id(self.purchased, upgrade_id):
            logger.info("Lost upgrade %s", upgrade_id)
        self._refresh_and_announce(events.UPGRADES_LOSE)

    def lose_ability(self, pilot_id: int) -> None:
        if _remove_first_with_id(self.purchased_abilities, pilot_id):
            logger.info("Lost pilot ability %s", pilot_id)
        self._refresh_and_announce(events.PILOT_ABILITIES_LOSE)

    def equip(self, upgrade_id: int) -> None:
        upgrade = self._upgrade_to_equip(upgrade_id)
        if upgrade is None:
            logger.warning("Cannot equip unknown upgrade %r", upgrade_id)
        else:
            self.equipped_upgrades.append(upgrade)
        self._refresh_and_announce(events.EQUIPPED_UPGRADES_UPDATE)

    def equip_ability(self, pilot_id: int) -> None:
        pilot = self._pilots_repo.find(pilot_id)
        if pilot is None:
            logger.warning("Cannot equip unknown pilot ability %r", pilot_id)
        else:
            self.equipped_abilities.append(pilot)
        self._refresh_and_announce(events.EQUIPPED_UPGRADES_UPDATE)

    def unequip_upgrade(self, upgrade_id: int) -> None:
        """Unequip the first equipped copy of an upgrade; nothing happens if none is equipped."""
        if _remove_first_with_id(self.equipped_upgrades, upgrade_id):
            self._refresh_and_announce(events.EQUIPPED_UPGRADES_UPDATE)

    def unequip_ability(self, pilot_id: int) -> None:
        if _remove_first_with_id(self.equipped_abilities, pilot_id):
            self._refresh_and_announce(events.EQUIPPED_UPGRADES_UPDATE)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_available_to_buy(self, slot_type: str) -> List[UpgradeDef]:
        """Return upgrades of a slot type that this build may still purchase."""
        return [
            upgrade
            for upgrade in self._upgrades_repo.by_slot(slot_type)
            if self.upgrade_allowed_on_ship(upgrade) and self.upgrade_allowed_in_build(upgrade)
        ]

    def get_abilities_available_to_buy(self) -> List[PilotDef]:
        not_purchased = difference_all(self._pilots_repo.unique(), self.purchased_abilities)
        return self._pilots_repo.sort_list(not_purchased)

    def upgrade_allowed_on_ship(self, upgrade: UpgradeDef) -> bool:
        current_ship = self.build.current_ship
        if upgrade.ship is not None and current_ship.name not in upgrade.ship:
            return False
        if upgrade.size is not None and current_ship.size not in upgrade.size:
            return False
        return True

    def ability_allowed_in_build(self, pilot: PilotDef) -> bool:
        return pilot.skill <= self.build.pilot_skill

    def upgrade_allowed_in_build(self, upgrade: UpgradeDef) -> bool:
        """Purchase filter: no starting upgrades, no second copies of most cards.

        Cards are compared by xws so both faces of a dual card count as one.
        """
        for starting_upgrade in self.build.current_ship.starting_upgrades:
            if starting_upgrade.xws == upgrade.xws:
                return False
        already_held = any(existing.xws == upgrade.xws for existing in self.all)
        if already_held:
            return upgrade.slot in DUPLICATE_SLOT_TYPES or upgrade.xws in DUPLICATE_XWS
        return True

    def ability_already_in_build(self, pilot: PilotDef) -> bool:
        return any(existing.id == pilot.id for existing in self.purchased_abilities)

    def can_equip_upgrade(self, upgrade_id: int) -> bool:
        upgrade = self._upgrades_repo.find(upgrade_id)
        if upgrade is None:
            return False
        return self._has_empty_enabled_slot(upgrade.slot)

    def can_equip_abilities(self) -> bool:
        return self._has_empty_enabled_slot(ELITE_SLOT)

    def export_ids(self) -> Dict[str, List[int]]:
        """Return the id lists this engine can be rebuilt from."""
        return {
            "upgrade_ids": [upgrade.id for upgrade in self.purchased],
            "equipped_upgrade_ids": [upgrade.id for upgrade in self.equipped_upgrades],
            "pilot_ids": [pilot.id for pilot in self.purchased_abilities],
            "equipped_ability_ids": [pilot.id for pilot in self.equipped_abilities],
        }

    # ------------------------------------------------------------------
    # Slot assignment
    # ------------------------------------------------------------------
    def equip_upgrades_to_slots(
        self, upgrades_to_equip: Sequence[UpgradeDef], abilities_to_equip: Sequence[PilotDef]
    ) -> tuple[List[UpgradeDef], List[PilotDef]]:
        """Place cards into the build's slots and return what was equipped.

        Free slots take only the starting upgrade they are bound to. Enabled
        slots then take the first remaining card of their type, Elite slots
        falling back to pilot abilities. Slots granted by placed upgrades are
        filled breadth-first, in the order they were granted.
        """
        registry = self.build.upgrade_slots
        # Grants are re-derived from scratch on every pass.
        registry.reset_additional_slots()
        assignment = _SlotAssignment(
            remaining_upgrades=list(upgrades_to_equip),
            remaining_abilities=list(abilities_to_equip),
        )
        pending: deque[int] = deque()

        for slot in registry.enumerate_free():
            match = self._match_free_slot(slot, assignment.remaining_upgrades)
            pending.extend(self._equip_slot(slot, match, assignment))

        for slot in registry.enumerate_enabled():
            match = self._match_slot(slot, assignment)
            pending.extend(self._equip_slot(slot, match, assignment))

        while pending:
            index = pending.popleft()
            slot = registry.slot_at(index)
            match = self._match_slot(slot, assignment)
            added = self._equip_slot(slot, match, assignment)
            if added:
                logger.debug("Slot %d (%s) granted further slots %s", index, slot.type, added)
            pending.extend(added)

        if assignment.remaining_upgrades or assignment.remaining_abilities:
            logger.debug(
                "No slot for %d upgrade(s) and %d ability(ies)",
                len(assignment.remaining_upgrades),
                len(assignment.remaining_abilities),
            )
        return assignment.equipped_upgrades, assignment.equipped_abilities

    @staticmethod
    def _match_free_slot(slot: Slot, remaining_upgrades: Sequence[UpgradeDef]) -> UpgradeDef | None:
        for upgrade in remaining_upgrades:
            if upgrade is slot.upgrade:
                return upgrade
        return None

    @staticmethod
    def _match_slot(slot: Slot, assignment: _SlotAssignment) -> Card | None:
        for upgrade in assignment.remaining_upgrades:
            if upgrade.slot == slot.type:
                return upgrade
        if slot.type == ELITE_SLOT and assignment.remaining_abilities:
            return assignment.remaining_abilities[0]
        return None

    def _equip_slot(self, slot: Slot, card: Card | None, assignment: _SlotAssignment) -> List[int]:
        """Put card into slot and return indices of any slots it granted."""
        slot.equipped = None
        if card is None:
            return []
        slot.equipped = card
        if card.kind == "ability":
            remove_first(assignment.remaining_abilities, card)
            assignment.equipped_abilities.append(card)
            return []
        remove_first(assignment.remaining_upgrades, card)
        assignment.equipped_upgrades.append(card)
        return self._add_upgrade_grant_slots(card)

    def _add_upgrade_grant_slots(self, upgrade: UpgradeDef) -> List[int]:
        added: List[int] = []
        for grant in upgrade.grants:
            if grant.is_slot and grant.name:
                added.append(self.build.upgrade_slots.add_additional_slot(grant.name))
        return added

    def _has_empty_enabled_slot(self, slot_type: str) -> bool:
        return any(
            slot.type == slot_type and slot.equipped is None
            for slot in self.build.upgrade_slots.enumerate_enabled()
        )

    def _refresh_and_announce(self, topic: str) -> None:
        self.refresh_upgrades_state()
        self._event_bus.announce(topic, self.build)

    def _upgrades_from_ids(self, upgrade_ids: Iterable[int]) -> List[UpgradeDef]:
        upgrades: List[UpgradeDef] = []
        for upgrade_id in upgrade_ids:
            upgrade = self._upgrades_repo.find(upgrade_id)
            if upgrade is None:
                logger.warning("Skipping unknown upgrade %r", upgrade_id)
                continue
            upgrades.append(upgrade)
        return upgrades

    def _upgrade_to_equip(self, upgrade_id: int) -> UpgradeDef | None:
        """Return an owned copy of the card that is not equipped yet, else the catalog one.

        Purchased copies come before starting upgrades.
        """
        owned = [*self.purchased, *self.build.current_ship.starting_upgrades]
        for upgrade in owned:
            if upgrade.id == upgrade_id and upgrade not in self.equipped_upgrades:
                return upgrade
        return self._upgrades_repo.find(upgrade_id)

    def _abilities_from_ids(self, pilot_ids: Iterable[int]) -> List[PilotDef]:
        abilities: List[PilotDef] = []
        for pilot_id in pilot_ids:
            pilot = self._pilots_repo.find(pilot_id)
            if pilot is None:
                logger.warning("Skipping unknown pilot ability %r", pilot_id)
                continue
            abilities.append(pilot)
        return abilities


def _remove_first_with_id(cards: List, card_id: int) -> bool:
    for index, card in enumerate(cards):
        if card.id == card_id:
            del cards[index]
            return True
    return False
