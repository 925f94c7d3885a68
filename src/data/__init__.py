from src.data.config import DatabaseSettings, get_settings
from src.data.models import Base, BankAccount, BoardCell, PlayerRecord
from src.data.session import (
    init_db,
    close_db,
    session_scope,
    create_tables,
    drop_tables,
    get_engine,
    get_session_factory,
)
from src.data.repository import SqlGameStore

__all__ = [
    "DatabaseSettings",
    "get_settings",
    "Base",
    "BankAccount",
    "BoardCell",
    "PlayerRecord",
    "init_db",
    "close_db",
    "session_scope",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session_factory",
    "SqlGameStore",
]
