"""
WebSocket-facing notifier.

Each connected client gets a bounded queue; ``send`` fans a message out
to every queue subscribed for the recipient. A client whose queue fills
up is dropped: its queue is left holding only ``DROPPED`` so the socket
handler knows to close the connection.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, Dict, Set

from src.core.events import Notifier

logger = logging.getLogger(__name__)

# Compared by identity in the socket handler
DROPPED: Dict[str, Any] = {"type": "dropped"}


class QueueNotifier(Notifier):
    def __init__(self, maxsize: int = 100):
        self.maxsize = maxsize
        self._clients: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, player_id: str) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self.maxsize)
        self._clients[player_id].add(q)
        logger.debug(f"Player {player_id} subscribed ({len(self._clients[player_id])} connection(s))")
        return q

    def unsubscribe(self, player_id: str, q: asyncio.Queue) -> None:
        queues = self._clients.get(player_id)
        if queues is None:
            return
        queues.discard(q)
        if not queues:
            del self._clients[player_id]

    def drop(self, player_id: str, q: asyncio.Queue) -> None:
        """Unsubscribe ``q`` and leave ``DROPPED`` as its only item."""
        self.unsubscribe(player_id, q)
        while not q.empty():
            q.get_nowait()
        q.put_nowait(DROPPED)

    async def send(self, recipient_id: str, text: str) -> None:
        queues = self._clients.get(recipient_id)
        if not queues:
            logger.debug(f"No open connection for player {recipient_id}, message dropped")
            return
        payload: Dict[str, Any] = {"type": "notification", "player_id": recipient_id, "text": text}
        for q in list(queues):
            # Best-effort; don't block if client is slow
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning(f"Dropping slow connection of player {recipient_id}")
                self.drop(recipient_id, q)
