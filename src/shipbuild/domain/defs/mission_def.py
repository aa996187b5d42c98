"""Mission definition structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class MissionDef:
    id: int
    name: str
