"""Upgrade card definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

from .grant_def import GrantDef


@dataclass(slots=True, eq=False)
class UpgradeDef:
    """Upgrade card as printed in the catalog.

    Compares by identity; the repository hands out one instance per id.
    """

    id: int
    name: str
    slot: str
    points: int
    xws: str
    ship: Tuple[str, ...] | None = None
    size: Tuple[str, ...] | None = None
    grants: Tuple[GrantDef, ...] = ()
    dual_card_name: str | None = None
    kind: Literal["upgrade"] = "upgrade"

    @property
    def display_name(self) -> str:
        return self.dual_card_name or self.name
