"""Upgrade slot arena for a ship build."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Set, Union

from shipbuild.core.types import SlotSource
from shipbuild.domain.defs import PilotDef, ShipDef, UpgradeDef

Card = Union[UpgradeDef, PilotDef]


@dataclass(slots=True, eq=False)
class Slot:
    """A typed capacity that holds at most one card.

    Free slots are pre-bound to one starting upgrade through ``upgrade``.
    """

    type: str
    source: SlotSource
    upgrade: UpgradeDef | None = None
    equipped: Card | None = None


class SlotRegistry:
    """Stores every slot of a build in one list addressed by stable index.

    Free and enabled slots are fixed when the registry is built. Granted slots
    are appended behind them while cards are equipped and dropped again by
    ``reset_additional_slots``, so indices of base slots never move.
    """

    def __init__(self, free: Sequence[Slot] = (), enabled: Sequence[Slot] = ()) -> None:
        self._slots: List[Slot] = [*free, *enabled]
        self._free_count = len(free)
        self._base_count = len(self._slots)

    @classmethod
    def for_ship(
        cls,
        ship: ShipDef,
        starting_upgrades: Sequence[UpgradeDef],
        pilot_skill: int,
    ) -> "SlotRegistry":
        free = [Slot(type=upgrade.slot, source="free", upgrade=upgrade) for upgrade in starting_upgrades]
        enabled = [
            Slot(type=slot_def.type, source="enabled")
            for slot_def in ship.upgrade_slots
            if slot_def.min_skill <= pilot_skill
        ]
        return cls(free=free, enabled=enabled)

    def enumerate_free(self) -> List[Slot]:
        return self._slots[: self._free_count]

    def enumerate_enabled(self) -> List[Slot]:
        return self._slots[self._free_count : self._base_count]

    def enumerate_granted(self) -> List[Slot]:
        return self._slots[self._base_count :]

    def all_usable_slot_types(self) -> Set[str]:
        """Return slot types a purchased card could currently be equipped into."""
        return {slot.type for slot in self._slots[self._free_count :]}

    def reset_additional_slots(self) -> None:
        del self._slots[self._base_count :]

    def add_additional_slot(self, slot_type: str) -> int:
        self._slots.append(Slot(type=slot_type, source="granted"))
        return len(self._slots) - 1

    def slot_at(self, index: int) -> Slot:
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)
