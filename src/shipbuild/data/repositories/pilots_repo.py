"""Pilots repository."""
from __future__ import annotations

from typing import Dict, Iterable, List

from shipbuild.data.repositories.base import RepositoryBase
from shipbuild.data.repositories.upgrades_repo import canonical_xws
from shipbuild.domain.defs import PilotDef


class PilotsRepository(RepositoryBase[int, PilotDef]):
    """Loads pilot cards; unique pilots double as buyable abilities."""

    def __init__(self, base_path=None) -> None:
        super().__init__("pilots.json", base_path)

    def unique(self) -> List[PilotDef]:
        return [pilot for pilot in self.all() if pilot.unique]

    @staticmethod
    def sort_list(pilots: Iterable[PilotDef]) -> List[PilotDef]:
        """Return pilots in catalog display order: skill, then name."""
        return sorted(pilots, key=lambda pilot: (pilot.skill, pilot.name, pilot.id))

    def _build(self, raw: dict[str, object]) -> Dict[int, PilotDef]:
        pilots: Dict[int, PilotDef] = {}
        for raw_id, payload in raw.items():
            pilot_id = self._parse_int_id(raw_id, "Pilot")
            context = f"pilot '{raw_id}'"
            data = self._require_mapping(payload, context)
            self._assert_exact_fields(
                data,
                {"name", "skill", "ship"},
                context,
                optional_fields={"unique", "xws"},
            )
            name = self._require_str(data["name"], f"{context} name")
            xws = data.get("xws")
            pilots[pilot_id] = PilotDef(
                id=pilot_id,
                name=name,
                skill=self._require_int(data["skill"], f"{context} skill"),
                ship=self._require_str(data["ship"], f"{context} ship"),
                xws=self._require_str(xws, f"{context} xws") if xws is not None else canonical_xws(name),
                unique=self._require_bool(data.get("unique", False), f"{context} unique"),
            )
        return pilots
