"""Service layer exports."""

from .build_service import BuildService
from .errors import BuildError
from .loadout_service import LoadoutService
from .xp_ledger_service import XpLedgerService

__all__ = [
    "BuildError",
    "BuildService",
    "LoadoutService",
    "XpLedgerService",
]
