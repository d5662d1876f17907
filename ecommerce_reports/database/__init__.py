"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_engine, snapshot_session
from .models import Base, RELATION_TABLES

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_engine",
    "snapshot_session",
    "Base",
    "RELATION_TABLES",
]
