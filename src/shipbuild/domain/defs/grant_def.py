"""Grant definition structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class GrantDef:
    """An effect an upgrade applies while equipped.

    Slot grants carry the slot type they add in ``name``.
    """

    type: str
    name: str | None = None

    @property
    def is_slot(self) -> bool:
        return self.type == "slot"
