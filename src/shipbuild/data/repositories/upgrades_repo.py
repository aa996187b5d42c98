"""Upgrades repository."""
from __future__ import annotations

import re
from typing import Dict, List, Tuple

from shipbuild.data.errors import DataValidationError
from shipbuild.data.repositories.base import RepositoryBase
from shipbuild.domain.defs import GrantDef, UpgradeDef

_XWS_STRIP = re.compile(r"[^a-z0-9]")


def canonical_xws(name: str) -> str:
    """Derive a cross-reference id from a card name ("Shield Upgrade" -> "shieldupgrade")."""
    return _XWS_STRIP.sub("", name.lower())


class UpgradesRepository(RepositoryBase[int, UpgradeDef]):
    """Loads and validates upgrade card definitions."""

    def __init__(self, base_path=None) -> None:
        super().__init__("upgrades.json", base_path)
        self._by_slot: Dict[str, List[UpgradeDef]] | None = None

    def by_slot(self, slot_type: str) -> List[UpgradeDef]:
        """Return upgrades of one slot type, in id order."""
        if self._by_slot is None:
            keyed: Dict[str, List[UpgradeDef]] = {}
            for upgrade in self.all():
                keyed.setdefault(upgrade.slot, []).append(upgrade)
            self._by_slot = keyed
        return list(self._by_slot.get(slot_type, []))

    def slot_types(self) -> List[str]:
        return sorted({upgrade.slot for upgrade in self.all()})

    def _build(self, raw: dict[str, object]) -> Dict[int, UpgradeDef]:
        upgrades: Dict[int, UpgradeDef] = {}
        for raw_id, payload in raw.items():
            upgrade_id = self._parse_int_id(raw_id, "Upgrade")
            context = f"upgrade '{raw_id}'"
            data = self._require_mapping(payload, context)
            self._assert_exact_fields(
                data,
                {"name", "slot", "points"},
                context,
                optional_fields={"xws", "ship", "size", "grants", "dual_card_name"},
            )
            name = self._require_str(data["name"], f"{context} name")
            xws = data.get("xws")
            dual_card_name = data.get("dual_card_name")
            upgrades[upgrade_id] = UpgradeDef(
                id=upgrade_id,
                name=name,
                slot=self._require_str(data["slot"], f"{context} slot"),
                points=self._require_int(data["points"], f"{context} points"),
                xws=self._require_str(xws, f"{context} xws") if xws is not None else canonical_xws(name),
                ship=self._optional_str_tuple(data.get("ship"), f"{context} ship"),
                size=self._optional_str_tuple(data.get("size"), f"{context} size"),
                grants=self._parse_grants(data.get("grants", []), context),
                dual_card_name=(
                    self._require_str(dual_card_name, f"{context} dual_card_name")
                    if dual_card_name is not None
                    else None
                ),
            )
        return upgrades

    def _optional_str_tuple(self, value: object, context: str) -> Tuple[str, ...] | None:
        if value is None:
            return None
        return tuple(self._require_str_list(value, context))

    def _parse_grants(self, raw_grants: object, context: str) -> Tuple[GrantDef, ...]:
        if not isinstance(raw_grants, list):
            raise DataValidationError(f"{context} grants must be a list.")
        grants: List[GrantDef] = []
        for index, entry in enumerate(raw_grants):
            grant_context = f"{context} grants[{index}]"
            grant_data = self._require_mapping(entry, grant_context)
            self._assert_exact_fields(grant_data, {"type"}, grant_context, optional_fields={"name"})
            grant_type = self._require_str(grant_data["type"], f"{grant_context} type")
            name = grant_data.get("name")
            if name is not None:
                name = self._require_str(name, f"{grant_context} name")
            if grant_type == "slot" and not name:
                raise DataValidationError(f"{grant_context} slot grants must name a slot type.")
            grants.append(GrantDef(type=grant_type, name=name))
        return tuple(grants)
