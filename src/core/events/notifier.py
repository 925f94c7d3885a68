"""
Best-effort outbound notifications to players.

Delivery failures never propagate: they are logged and the message is
dropped, without retries.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    recipient_id: str
    text: str


class Notifier(ABC):
    """Sends a text message to a player."""

    @abstractmethod
    async def send(self, recipient_id: str, text: str) -> None:
        ...


class NullNotifier(Notifier):
    """Discards every message."""

    async def send(self, recipient_id: str, text: str) -> None:
        return None


async def deliver(notifier: Notifier, notifications: Iterable[Notification]) -> int:
    """
    Send every notification, swallowing individual failures.

    Returns:
        Number of notifications handed over successfully
    """
    delivered = 0
    for note in notifications:
        try:
            await notifier.send(note.recipient_id, note.text)
            delivered += 1
        except Exception as e:
            logger.warning(f"Failed to notify player {note.recipient_id}: {e}")
    return delivered
