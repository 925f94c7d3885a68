"""
Tests for landing settlement: rent, bonuses, tax office and elimination.
"""

import pytest

from src.core.exceptions import BankTransactionFailed, DatabaseError, NotInGame
from src.core.game.board import UNOWNED, Cell, CellEffect, CellKey, CellType, OwnedBy
from src.core.game.money import EventType
from src.core.game.settlement import settle_landing, tax_due
from src.core.game.store import BankUpdate, InMemoryStore


class FrozenBankStore(InMemoryStore):
    async def apply_bank_delta(self, delta):
        return BankUpdate(committed=False)


class BrokenCreditStore(InMemoryStore):
    """Crediting bob fails at the database level."""

    async def apply_wallet_delta(self, player_id, delta, floor=None):
        if player_id == "bob":
            raise DatabaseError("connection reset")
        return await super().apply_wallet_delta(player_id, delta, floor)


async def _store_with(cells, *players, bank=1000, store_cls=InMemoryStore):
    store = store_cls(cells, bank_balance=bank)
    for p in players:
        await store.save_player(p)
    return store


def _cells(board_factory, **overrides):
    cells = {c.key: c for c in board_factory()}
    for token, changes in overrides.items():
        key = CellKey.parse(token)
        for name, value in changes.items():
            setattr(cells[key], name, value)
    return list(cells.values())


@pytest.mark.asyncio
async def test_rent_paid_to_owner(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    bob = player_factory("bob", wallet=0)
    cells = _cells(board_factory, **{"2_3": {"ownership": OwnedBy("bob"), "land_cost": 40}})
    store = await _store_with(cells, alice, bob)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 60
    assert result.amount == 40
    assert not result.eliminated
    assert (await store.get_player("bob")).wallet == 40
    assert await store.get_bank_balance() == 1000
    [event] = result.events
    assert event.event_type == EventType.RENT_PAYMENT
    assert event.details["owner_id"] == "bob"
    assert event.details["owner_balance"] == 40


@pytest.mark.asyncio
async def test_state_cell_rent_goes_to_bank(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    cells = _cells(board_factory, **{"1_1": {"land_cost": 15}})
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(1, 1)), scripted_rng())

    assert result.wallet == 85
    assert await store.get_bank_balance() == 1015
    assert result.events[0].details["owner_id"] is None


@pytest.mark.asyncio
async def test_rent_for_departed_owner_goes_to_bank(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    cells = _cells(board_factory, **{"1_1": {"ownership": OwnedBy("ghost"), "land_cost": 20}})
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(1, 1)), scripted_rng())

    assert result.wallet == 80
    assert await store.get_bank_balance() == 1020
    assert result.events[0].details["owner_id"] is None


@pytest.mark.asyncio
async def test_negative_land_cost_is_a_bonus_from_the_bank(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    cells = _cells(board_factory, **{"2_3": {"land_cost": -10}})
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 15
    assert await store.get_bank_balance() == 990
    assert result.events[0].event_type == EventType.BONUS_PAYOUT


@pytest.mark.asyncio
async def test_negative_land_cost_on_owned_cell_is_paid_by_owner(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    bob = player_factory("bob", wallet=50)
    cells = _cells(board_factory, **{"2_3": {"ownership": OwnedBy("bob"), "land_cost": -10}})
    store = await _store_with(cells, alice, bob)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 15
    assert (await store.get_player("bob")).wallet == 40


@pytest.mark.asyncio
async def test_landing_on_own_cell_is_free(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    cells = _cells(board_factory, **{"2_3": {"ownership": OwnedBy("alice"), "land_cost": 500}})
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.self_owned
    assert result.wallet == 5
    assert result.events[0].event_type == EventType.SELF_LANDING


@pytest.mark.asyncio
async def test_zero_cost_landing(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    store = await _store_with(board_factory(), alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 5
    assert result.events[0].event_type == EventType.FREE_LANDING
    assert await store.get_bank_balance() == 1000


def test_tax_due_sums_owned_land_costs(board_factory):
    cells = _cells(
        board_factory,
        **{
            "1_1": {"ownership": OwnedBy("alice"), "land_cost": 10},
            "1_2": {"ownership": OwnedBy("alice"), "land_cost": 25},
            "1_3": {"ownership": OwnedBy("bob"), "land_cost": 99},
        },
    )
    assert tax_due({c.key: c for c in cells}, "alice") == 35
    assert tax_due({c.key: c for c in cells}, "carol") == 0


@pytest.mark.asyncio
async def test_tax_office_charges_sum_of_owned_land_costs(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    cells = _cells(
        board_factory,
        **{
            "1_1": {"ownership": OwnedBy("alice"), "land_cost": 10},
            "3_3": {"ownership": OwnedBy("alice"), "land_cost": 25},
            "2_3": {"cell_type": CellType.SPECIAL, "effect": CellEffect.TAX_OFFICE, "land_cost": 999,
                    "purchase_price": 0},
        },
    )
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.tax_office
    assert result.amount == 35
    assert result.wallet == 65
    assert await store.get_bank_balance() == 1035
    assert result.events[0].event_type == EventType.TAX_PAYMENT


@pytest.mark.asyncio
async def test_tax_office_without_parcels_is_free(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    cells = _cells(
        board_factory,
        **{"2_3": {"cell_type": CellType.SPECIAL, "effect": CellEffect.TAX_OFFICE, "purchase_price": 0}},
    )
    store = await _store_with(cells, alice)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 100
    assert result.events[0].event_type == EventType.FREE_LANDING
    assert result.events[0].details["tax_office"] is True


@pytest.mark.asyncio
async def test_shortfall_triggers_liquidation_then_rent(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=10)
    bob = player_factory("bob", wallet=0)
    cells = _cells(
        board_factory,
        **{
            "1_1": {"ownership": OwnedBy("alice"), "purchase_price": 100},
            "2_3": {"ownership": OwnedBy("bob"), "land_cost": 50},
        },
    )
    store = await _store_with(cells, alice, bob)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.wallet == 30
    assert not result.eliminated
    assert (await store.get_cell(CellKey(1, 1))).ownership == UNOWNED
    assert (await store.get_player("bob")).wallet == 50
    assert await store.get_bank_balance() == 930
    assert [e.event_type for e in result.events] == [EventType.AUTO_SALE, EventType.RENT_PAYMENT]


@pytest.mark.asyncio
async def test_exhausted_liquidation_eliminates_player(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=10)
    bob = player_factory("bob", wallet=0)
    cells = _cells(
        board_factory,
        **{
            "1_1": {"ownership": OwnedBy("alice"), "purchase_price": 20},
            "2_3": {"ownership": OwnedBy("bob"), "land_cost": 50},
        },
    )
    store = await _store_with(cells, alice, bob)

    result = await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert result.eliminated
    assert result.wallet == 24
    assert await store.get_player("alice") is None
    # Owner is not paid when the lander is eliminated
    assert (await store.get_player("bob")).wallet == 0
    assert result.events[-1].event_type == EventType.ELIMINATED
    assert result.events[-1].details["required"] == 50


@pytest.mark.asyncio
async def test_rent_is_persisted_for_both_players(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    bob = player_factory("bob", wallet=0)
    cells = _cells(board_factory, **{"2_3": {"ownership": OwnedBy("bob"), "land_cost": 40}})
    store = await _store_with(cells, alice, bob)

    await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert (await store.get_player("alice")).wallet == 60
    assert (await store.get_player("bob")).wallet == 40


@pytest.mark.asyncio
async def test_rejected_bank_deposit_refunds_payer(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    cells = _cells(board_factory, **{"1_1": {"land_cost": 15}})
    store = await _store_with(cells, alice, store_cls=FrozenBankStore)

    with pytest.raises(BankTransactionFailed):
        await settle_landing(store, game_config, alice, await store.get_cell(CellKey(1, 1)), scripted_rng())

    assert (await store.get_player("alice")).wallet == 100


@pytest.mark.asyncio
async def test_rejected_bank_bonus_pays_nothing(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    cells = _cells(board_factory, **{"2_3": {"land_cost": -10}})
    store = await _store_with(cells, alice, store_cls=FrozenBankStore)

    with pytest.raises(BankTransactionFailed):
        await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert (await store.get_player("alice")).wallet == 5


@pytest.mark.asyncio
async def test_failed_owner_credit_refunds_payer(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=100)
    bob = player_factory("bob", wallet=0)
    cells = _cells(board_factory, **{"2_3": {"ownership": OwnedBy("bob"), "land_cost": 40}})
    store = await _store_with(cells, alice, bob, store_cls=BrokenCreditStore)

    with pytest.raises(DatabaseError):
        await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert (await store.get_player("alice")).wallet == 100
    assert await store.get_bank_balance() == 1000


@pytest.mark.asyncio
async def test_bonus_for_departed_lander_is_returned_to_bank(game_config, board_factory, player_factory, scripted_rng):
    alice = player_factory("alice", wallet=5)
    cells = _cells(board_factory, **{"2_3": {"land_cost": -10}})
    store = await _store_with(cells)

    with pytest.raises(NotInGame):
        await settle_landing(store, game_config, alice, await store.get_cell(CellKey(2, 3)), scripted_rng())

    assert await store.get_bank_balance() == 1000
