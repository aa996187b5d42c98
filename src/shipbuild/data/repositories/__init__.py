"""Repository exports."""

from .missions_repo import MissionsRepository
from .pilots_repo import PilotsRepository
from .ships_repo import ShipsRepository
from .upgrades_repo import UpgradesRepository

__all__ = [
    "MissionsRepository",
    "PilotsRepository",
    "ShipsRepository",
    "UpgradesRepository",
]
