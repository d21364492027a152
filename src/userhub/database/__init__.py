"""
Database module for userhub
"""

from .connection import (
    close_database,
    create_tables,
    get_async_engine,
    get_async_session,
    init_database,
)

__all__ = [
    "close_database",
    "create_tables",
    "get_async_engine",
    "get_async_session",
    "init_database",
]
