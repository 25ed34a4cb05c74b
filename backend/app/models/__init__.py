"""
SQLAlchemy models package.
All models are imported here so `Base.metadata` sees every table.
"""
from app.models.order import Order, OrderLineItem
from app.models.product import Collection, Product, ProductVariant, product_collections
from app.models.returns import ReturnProduct, ReturnReason, ReturnRecord
from app.models.store import Platform, Store

__all__ = [
    "Store",
    "Platform",
    "Order",
    "OrderLineItem",
    "Product",
    "ProductVariant",
    "Collection",
    "product_collections",
    "ReturnRecord",
    "ReturnProduct",
    "ReturnReason",
]
