"""Shared type aliases for the core and domain layers."""
from typing import Literal

ShipSize = Literal["small", "large"]
SlotSource = Literal["free", "enabled", "granted"]

ELITE_SLOT = "Elite"

__all__ = ["ELITE_SLOT", "ShipSize", "SlotSource"]
