from src.core.events import map_event, map_events
from src.core.game.board import CellKey
from src.core.game.money import EventType, GameEvent


def test_map_roll_and_move():
    events = [
        GameEvent(EventType.DICE_ROLL, "alice", {"steps": 2, "turn": "RIGHT"}),
        GameEvent(EventType.MOVE, "alice", {"from": CellKey(2, 2), "to": CellKey(3, 2), "heading": "EAST"}),
    ]
    mapped = map_events(events)

    assert [e["event_type"] for e in mapped] == ["dice_roll", "move"]
    assert mapped[0] == {"event_type": "dice_roll", "player_id": "alice", "steps": 2, "turn": "RIGHT"}
    assert mapped[1]["from_position"] == {"x": 2, "y": 2}
    assert mapped[1]["to_position"] == {"x": 3, "y": 2}
    assert mapped[1]["heading"] == "EAST"


def test_map_rent_payment():
    event = GameEvent(
        EventType.RENT_PAYMENT,
        "alice",
        {"cell": CellKey(2, 3), "amount": 50, "owner_id": "bob", "owner_balance": 50, "wallet": 30},
    )
    mapped = map_event(event)
    assert mapped["cell"] == {"x": 2, "y": 3}
    assert mapped["amount"] == 50
    assert mapped["owner_id"] == "bob"
    assert mapped["wallet_after"] == 30


def test_map_sale_keeps_failure_reason():
    event = GameEvent(EventType.AUTO_SALE_FAILED, "alice", {"cell": CellKey(1, 1), "price": 70, "reason": "bank"})
    mapped = map_event(event)
    assert mapped["price"] == 70
    assert mapped["reason"] == "bank"


def test_unknown_details_pass_through_flattened():
    event = GameEvent(EventType.SELF_LANDING, "alice", {"cell": CellKey(1, 2)})
    assert map_event(event) == {"event_type": "self_landing", "player_id": "alice", "cell": {"x": 1, "y": 2}}


def test_system_event_has_no_player():
    mapped = map_event(GameEvent(EventType.TURN_BONUS, details={"amount": 5}))
    assert "player_id" not in mapped
