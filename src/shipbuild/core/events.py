"""Synchronous topic-based event announcement."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

UPGRADES_ADD = "model.build.upgrades.add"
UPGRADES_LOSE = "model.build.upgrades.lose"
PILOT_ABILITIES_ADD = "model.build.pilotAbilities.add"
PILOT_ABILITIES_LOSE = "model.build.pilotAbilities.lose"
EQUIPPED_UPGRADES_UPDATE = "model.build.equippedUpgrades.update"
CURRENT_SHIP_UPDATE = "model.build.currentShip.update"
PILOT_SKILL_UPDATE = "model.build.pilotSkill.update"

Subscriber = Callable[[Any], None]


class EventBus:
    """Delivers announcements to subscribers immediately, in subscription order.

    Subscribers may read the payload but must not call back into a mutating
    operation of the object that announced it.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Subscriber]] = {}

    def subscribe(self, topic: str, callback: Subscriber) -> None:
        self._subscribers.setdefault(topic, []).append(callback)

    def unsubscribe(self, topic: str, callback: Subscriber) -> bool:
        callbacks = self._subscribers.get(topic, [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        return True

    def announce(self, topic: str, payload: Any) -> None:
        callbacks = list(self._subscribers.get(topic, []))
        logger.debug("Announcing %s to %d subscriber(s)", topic, len(callbacks))
        for callback in callbacks:
            callback(payload)


__all__ = [
    "CURRENT_SHIP_UPDATE",
    "EQUIPPED_UPGRADES_UPDATE",
    "EventBus",
    "PILOT_ABILITIES_ADD",
    "PILOT_ABILITIES_LOSE",
    "PILOT_SKILL_UPDATE",
    "Subscriber",
    "UPGRADES_ADD",
    "UPGRADES_LOSE",
]
