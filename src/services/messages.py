"""
Player-facing text for game actions.

Everything a player reads is produced here from engine events and
state, so the engine itself never formats prose.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from src.core.game.board import Cell, CellKey
from src.core.game.directions import Heading, TurnChoice
from src.core.game.money import EventType, GameEvent
from src.core.game.player import PlayerState

STATE_NAME = "the State"

HEADING_EMOJIS = {
    Heading.NORTH: "⬆️",
    Heading.EAST: "➡️",
    Heading.SOUTH: "⬇️",
    Heading.WEST: "⬅️",
}

TURN_WORDS = {
    TurnChoice.RIGHT: "right",
    TurnChoice.LEFT: "left",
    TurnChoice.STRAIGHT: "straight",
    TurnChoice.BACK: "back",
}

RETRY_MESSAGE = "Something went wrong while processing your move. Please try again."


def heading_label(heading: Heading) -> str:
    return f"{heading.value} {HEADING_EMOJIS[heading]}"


def owner_name(owner_id: Optional[str], names: Dict[str, str]) -> str:
    if owner_id is None:
        return STATE_NAME
    return names.get(owner_id, "an unknown player")


def not_in_game(name: Optional[str] = None) -> str:
    greeting = f"Hi, {name}! " if name else ""
    return f"{greeting}Send /start to join the game."


def welcome(player: PlayerState) -> str:
    return (
        f"Welcome to the game, {player.name}! You are on {player.position.label}, "
        f"facing {heading_label(player.heading)}. You start with {player.wallet} coins. "
        f"Send /move to roll the dice."
    )


def already_playing(player: PlayerState) -> str:
    return (
        f"You are already in the game, {player.name}! Position: {player.position.label}, "
        f"facing {heading_label(player.heading)}. Wallet: {player.wallet} coins. "
        f"Turns played: {player.turns_played}."
    )


def turn_skipped(player: PlayerState) -> str:
    return (
        f"You skip this turn because of the previous cell! You are still on "
        f"{player.position.label}, facing {heading_label(player.heading)}. "
        f"Wallet: {player.wallet} coins. Turns played: {player.turns_played}."
    )


def roll_line(steps: int, choice: TurnChoice) -> str:
    return f"You rolled {steps} step{'s' if steps != 1 else ''} and turned {TURN_WORDS[choice]}."


def describe_event(event: GameEvent, names: Dict[str, str]) -> Optional[str]:
    """One line of text for a settlement or liquidation event."""
    d = event.details
    etype = event.event_type
    cell: Optional[CellKey] = d.get("cell")

    if etype == EventType.SELF_LANDING:
        return f"You landed on your own cell {cell.label}. No landing fee!"
    if etype == EventType.FREE_LANDING:
        if d.get("tax_office"):
            return "You reached the Tax Office! You own no paying parcels, so no tax is due."
        return f"You landed on {cell.label}. Neutral ground, nothing to pay."
    if etype == EventType.TAX_PAYMENT:
        return f"You reached the Tax Office! Tax on your holdings: {d['amount']} coins paid."
    if etype == EventType.RENT_PAYMENT:
        line = (
            f"You landed on {cell.label} owned by {owner_name(d.get('owner_id'), names)} "
            f"and paid {d['amount']} coins."
        )
        if d.get("owner_id") is None:
            line += " The money went to the Bank."
        return line
    if etype == EventType.BONUS_PAYOUT:
        line = f"You landed on {cell.label} and received a bonus of {-d['amount']} coins!"
        if d.get("owner_id") is None:
            line += " Paid out by the Bank."
        return line
    if etype == EventType.AUTO_SALE:
        return f"Not enough coins! Your parcel {cell.label} was sold to the Bank for {d['price']} coins."
    if etype == EventType.AUTO_SALE_FAILED:
        return f"Selling your parcel {cell.label} failed because of a bank error."
    if etype == EventType.ELIMINATED:
        return (
            f"GAME OVER! You cannot pay {d['required']} coins (you have {d['wallet']}). "
            f"You are out of the game."
        )
    if etype == EventType.SPECIAL_EFFECT:
        line = d.get("message") or ""
        if d.get("effect") == "go_back":
            line = f"{line} You moved back to {d['position'].label}.".strip()
        return line or None
    return None


def describe_events(events: Iterable[GameEvent], names: Dict[str, str]) -> List[str]:
    lines = []
    for event in events:
        line = describe_event(event, names)
        if line:
            lines.append(line)
    return lines


def cell_details(cell: Cell, names: Dict[str, str]) -> str:
    lines = [
        f"Cell {cell.key.label}:",
        f" • Owner: {owner_name(cell.owner_id, names)}.",
    ]
    if cell.land_cost > 0:
        lines.append(f" • Landing fee: {cell.land_cost} coins.")
    else:
        lines.append(" • Landing here is free.")
    if cell.owner_id is None:
        if cell.is_purchasable:
            lines.append(f" • Purchase price: {cell.purchase_price} coins.")
        else:
            lines.append(" • Not for sale.")
    return "\n".join(lines)


def position_line(position: CellKey, heading: Heading, wallet: int, turns_played: int) -> str:
    return (
        f"You are now on {position.label}, facing {heading_label(heading)}. "
        f"Wallet: {wallet} coins. This was turn #{turns_played}."
    )


def bonus_line(turns_played: int, bonus: int) -> str:
    return f"🎁 Turn #{turns_played} bonus: +{bonus} coins!"


def rent_received(payer_name: str, cell: CellKey, amount: int, balance: int) -> str:
    return (
        f"💰 Payment received! {payer_name} landed on your cell {cell.label} and paid "
        f"{amount} coins. Your balance: {balance} coins."
    )


def moved_broadcast(name: str, position: CellKey, special: Optional[str], bonus_turn: Optional[int]) -> str:
    text = f"📢 {name} moved to {position.label}!"
    if special:
        text += f" ({special.split('.')[0]}!)"
    if bonus_turn:
        text += f" (Turn #{bonus_turn}: {name} got a bonus!)"
    return text


def forced_sale_broadcast(name: str, cells: List[CellKey]) -> str:
    labels = ", ".join(c.label for c in cells)
    return f"📣 {name} had to sell {labels} to keep playing. They are up for purchase again!"


def eliminated_broadcast(name: str) -> str:
    return f"☠️ {name} went bankrupt and left the game!"


def purchased(cell: Cell, price: int, wallet: int, adjacency: int) -> str:
    text = (
        f"Congratulations! You bought {cell.key.label} for {price} coins. "
        f"The money went to the Bank. Wallet: {wallet} coins."
    )
    if adjacency:
        text += (
            f"\n💰 Thanks to your neighbouring parcels the landing fee here is now "
            f"{cell.land_cost} coins (+{adjacency} for adjacency)."
        )
    return text


def purchased_broadcast(name: str, cell: CellKey) -> str:
    return f"🎉 {name} bought {cell.label}!"


def sold(cell: CellKey, price: int, wallet: int) -> str:
    return (
        f"You sold {cell.label} for {price} coins, paid by the Bank. Wallet: {wallet} coins. "
        f"The cell belongs to the State again."
    )


def sold_broadcast(name: str, cell: CellKey) -> str:
    return f"📣 {name} sold {cell.label}! It is up for purchase again."
