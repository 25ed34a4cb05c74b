"""
Core package containing configuration, database, errors, security, and logging.
"""
from app.core.config import Settings, get_settings
from app.core.database import Base, Database, DbHandle, DbSession, get_db_session
from app.core.errors import AppError, RecordValidationError, StoreError, SyncError
from app.core.logging import configure_logging, get_logger
from app.core.security import TokenCipher

__all__ = [
    "Settings",
    "get_settings",
    "Base",
    "Database",
    "DbHandle",
    "DbSession",
    "get_db_session",
    "AppError",
    "StoreError",
    "SyncError",
    "RecordValidationError",
    "configure_logging",
    "get_logger",
    "TokenCipher",
]
