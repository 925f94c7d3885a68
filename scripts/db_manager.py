#!/usr/bin/env python3
"""
Database management utility script.

Usage:
    python scripts/db_manager.py init              # Create tables
    python scripts/db_manager.py reset             # Drop and recreate tables (DEV ONLY!)
    python scripts/db_manager.py seed <board.json> # Load a board layout
    python scripts/db_manager.py stats             # Show game statistics
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root))

from sqlalchemy import text

from src.core.game.board import load_board
from src.data import (
    SqlGameStore,
    close_db,
    create_tables,
    drop_tables,
    init_db,
    session_scope,
)


async def init():
    """Initialize database connection and create tables."""
    print("🔧 Initializing database...")
    await init_db()
    print("✅ Database initialized")

    print("\n📋 Creating tables...")
    await create_tables()
    print("✅ Tables created")

    await close_db()


async def reset():
    """Drop all tables and recreate them (DESTRUCTIVE!)."""
    print("⚠️  WARNING: This will DELETE ALL DATA!")
    response = input("Are you sure? Type 'yes' to continue: ")

    if response.lower() != "yes":
        print("❌ Aborted")
        return

    print("\n🗑️  Dropping all tables...")
    await init_db()
    await drop_tables()
    print("✅ Tables dropped")

    print("\n📋 Recreating tables...")
    await create_tables()
    print("✅ Tables created")

    await close_db()


async def seed(board_file: str):
    """Insert or replace board cells from a JSON layout."""
    cells = load_board(board_file)
    print(f"🗺️  Loaded {len(cells)} cells from {board_file}")

    store = SqlGameStore(await init_db())
    await create_tables()
    count = await store.seed_board(cells)
    print(f"✅ Seeded {count} cells")

    await close_db()


async def stats():
    """Show database statistics."""
    print("📊 Database Statistics\n")

    store = SqlGameStore(await init_db())

    players = await store.list_players()
    print(f"👥 Active Players: {len(players)}")

    balance = await store.get_bank_balance()
    print(f"🏦 Bank Balance: {balance if balance is not None else 'not initialized'}")

    async with session_scope() as session:
        result = await session.execute(text("SELECT COUNT(*) FROM board_cells"))
        print(f"🗺️  Board Cells: {result.scalar()}")

    owned = await store.count_owned_cells()
    if players:
        print("\n💰 Players:")
        for pid, p in sorted(players.items(), key=lambda item: item[1].wallet, reverse=True):
            print(
                f"   - {p.name} ({pid}): {p.wallet} coins, {owned.get(pid, 0)} parcels, "
                f"{p.turns_played} turns at {p.position.label}"
            )

    await close_db()


async def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1].lower()

    if command == "seed":
        if len(sys.argv) < 3:
            print("❌ Missing board file")
            print(__doc__)
            sys.exit(1)
        await seed(sys.argv[2])
        return

    commands = {
        "init": init,
        "reset": reset,
        "stats": stats,
    }

    if command not in commands:
        print(f"❌ Unknown command: {command}")
        print(__doc__)
        sys.exit(1)

    await commands[command]()


if __name__ == "__main__":
    asyncio.run(main())
