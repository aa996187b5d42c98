"""Wiring of repositories and services from user config."""
from __future__ import annotations

from dataclasses import dataclass

from shipbuild.config import Config, configure_logging, load_config, resolve_definitions_path
from shipbuild.core.events import EventBus
from shipbuild.data.repositories import (
    MissionsRepository,
    PilotsRepository,
    ShipsRepository,
    UpgradesRepository,
)
from shipbuild.services import BuildService, XpLedgerService


@dataclass(slots=True)
class Services:
    event_bus: EventBus
    upgrades_repo: UpgradesRepository
    pilots_repo: PilotsRepository
    ships_repo: ShipsRepository
    missions_repo: MissionsRepository
    build_service: BuildService
    ledger_service: XpLedgerService


def build_services(config: Config | None = None) -> Services:
    """Configure logging and construct services over the configured catalog.

    Without a config the per-user config file is read.
    """
    if config is None:
        config = load_config()
    configure_logging(config)
    definitions_path = resolve_definitions_path(config)
    event_bus = EventBus()
    upgrades_repo = UpgradesRepository(base_path=definitions_path)
    pilots_repo = PilotsRepository(base_path=definitions_path)
    ships_repo = ShipsRepository(upgrades_repo=upgrades_repo, base_path=definitions_path)
    missions_repo = MissionsRepository(base_path=definitions_path)
    return Services(
        event_bus=event_bus,
        upgrades_repo=upgrades_repo,
        pilots_repo=pilots_repo,
        ships_repo=ships_repo,
        missions_repo=missions_repo,
        build_service=BuildService(
            ships_repo=ships_repo,
            upgrades_repo=upgrades_repo,
            pilots_repo=pilots_repo,
            event_bus=event_bus,
        ),
        ledger_service=XpLedgerService(
            ships_repo=ships_repo,
            upgrades_repo=upgrades_repo,
            pilots_repo=pilots_repo,
            missions_repo=missions_repo,
        ),
    )
