"""Domain definition exports."""

from .grant_def import GrantDef
from .mission_def import MissionDef
from .pilot_def import PilotDef
from .ship_def import ShipDef, ShipSlotDef
from .upgrade_def import UpgradeDef

__all__ = [
    "GrantDef",
    "MissionDef",
    "PilotDef",
    "ShipDef",
    "ShipSlotDef",
    "UpgradeDef",
]
