"""Missions repository."""
from __future__ import annotations

from typing import Dict

from shipbuild.data.repositories.base import RepositoryBase
from shipbuild.domain.defs import MissionDef


class MissionsRepository(RepositoryBase[int, MissionDef]):
    """Loads campaign mission names."""

    def __init__(self, base_path=None) -> None:
        super().__init__("missions.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[int, MissionDef]:
        missions: Dict[int, MissionDef] = {}
        for raw_id, payload in raw.items():
            mission_id = self._parse_int_id(raw_id, "Mission")
            context = f"mission '{raw_id}'"
            data = self._require_mapping(payload, context)
            self._assert_exact_fields(data, {"name"}, context)
            missions[mission_id] = MissionDef(
                id=mission_id,
                name=self._require_str(data["name"], f"{context} name"),
            )
        return missions
