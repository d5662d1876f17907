"""
Source Data Module
"""
from .models import Customer, Order, OrderItem, OrderStatus, Product, WebSession
from .snapshot import RELATIONS, Snapshot, SnapshotValidationError

__all__ = [
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "WebSession",
    "RELATIONS",
    "Snapshot",
    "SnapshotValidationError",
]
