"""Pilot definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(slots=True, eq=False)
class PilotDef:
    """Pilot card whose ability can be bought into an Elite slot."""

    id: int
    name: str
    skill: int
    ship: str
    xws: str
    unique: bool = False
    kind: Literal["ability"] = "ability"
