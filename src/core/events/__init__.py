"""
Event utilities: canonical mapping and outbound notifications.

This package exposes helpers to convert internal engine events into a
stable, public-facing JSON shape, and the best-effort notification
interface used to reach other players.
"""

from src.core.events.mapper import map_event, map_events
from src.core.events.notifier import Notification, Notifier, NullNotifier, deliver

__all__ = [
    "map_event",
    "map_events",
    "Notification",
    "Notifier",
    "NullNotifier",
    "deliver",
]
