from .config import config
from .db import db, initialize
from .logging_setup import logger
from .exceptions import (
    InventoryError, ConfigError, ValidationError, ConflictError,
    NotFoundError, InsufficientStockError, PersistenceError
)

__all__ = [
    'config',
    'db',
    'initialize',
    'logger',
    'InventoryError',
    'ConfigError',
    'ValidationError',
    'ConflictError',
    'NotFoundError',
    'InsufficientStockError',
    'PersistenceError'
]
