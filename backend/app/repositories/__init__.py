"""
Repository package for data access layer.
"""
from app.repositories.base import BaseRepository, require_identifier
from app.repositories.order import OrderRepository
from app.repositories.product import ProductRepository
from app.repositories.returns import ReturnRepository
from app.repositories.store import StoreRepository

__all__ = [
    "BaseRepository",
    "require_identifier",
    "StoreRepository",
    "OrderRepository",
    "ProductRepository",
    "ReturnRepository",
]
