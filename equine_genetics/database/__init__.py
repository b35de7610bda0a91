"""Database layer for equine_genetics."""

from .connection import get_db_connection, create_database, transaction
from .schema import create_schema, drop_schema
from .store import AnimalStore, AnimalTransaction

__all__ = [
    'get_db_connection', 'create_database', 'transaction',
    'create_schema', 'drop_schema',
    'AnimalStore', 'AnimalTransaction',
]
