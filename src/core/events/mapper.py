"""
Mapping from internal GameEvent objects to canonical public JSON events.

The engine emits GameEvent objects whose details may hold CellKey
tuples. This module produces stable, JSON-friendly dicts with
consistent event_type strings and payload keys.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from src.core.game.board import CellKey
from src.core.game.money import EventType, GameEvent


def _cell(value: Any) -> Any:
    if isinstance(value, CellKey):
        return {"x": value.x, "y": value.y}
    return value


def map_event(event: GameEvent) -> Dict[str, Any]:
    """
    Map a single GameEvent to a canonical JSON dict.

    Returns:
        dict with keys: event_type (str), player_id (optional), and event-specific fields
    """
    d = event.details
    base: Dict[str, Any] = {"event_type": event.event_type.value}
    if event.player_id is not None:
        base["player_id"] = event.player_id

    if event.event_type == EventType.DICE_ROLL:
        base.update(steps=d.get("steps"), turn=d.get("turn"))
        return base

    if event.event_type == EventType.MOVE:
        base.update(
            from_position=_cell(d.get("from")),
            to_position=_cell(d.get("to")),
            heading=d.get("heading"),
        )
        return base

    if event.event_type in (EventType.RENT_PAYMENT, EventType.BONUS_PAYOUT, EventType.TAX_PAYMENT):
        base.update(
            cell=_cell(d.get("cell")),
            amount=d.get("amount"),
            owner_id=d.get("owner_id"),
            wallet_after=d.get("wallet"),
        )
        return base

    if event.event_type in (EventType.AUTO_SALE, EventType.AUTO_SALE_FAILED, EventType.SALE, EventType.PURCHASE):
        base.update(cell=_cell(d.get("cell")), price=d.get("price"))
        if "land_cost" in d:
            base["land_cost"] = d["land_cost"]
        if "reason" in d:
            base["reason"] = d["reason"]
        return base

    if event.event_type == EventType.SPECIAL_EFFECT:
        base.update(
            cell=_cell(d.get("cell")),
            effect=d.get("effect"),
            position=_cell(d.get("position")),
        )
        return base

    # Fallback: pass through details with cell keys flattened
    base.update({k: _cell(v) for k, v in d.items()})
    return base


def map_events(events: Iterable[GameEvent]) -> List[Dict[str, Any]]:
    """Map a sequence of GameEvent objects to canonical dicts."""
    return [map_event(e) for e in events]
