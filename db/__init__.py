"""Database layer for the reservation engine."""

from .base import Base, RecordedAtMixin
from .models_sqlalchemy import (
    Dish,
    Feedback,
    Location,
    Order,
    OrderLine,
    PreOrder,
    PreOrderItem,
    Reservation,
    RestaurantTable,
    User,
)
from .session import (
    engine,
    SessionLocal,
    create_engine,
    create_session_factory,
    get_session,
    init_db,
    close_db,
)

__all__ = [
    # Base
    "Base",
    "RecordedAtMixin",
    # Models
    "Dish",
    "Feedback",
    "Location",
    "Order",
    "OrderLine",
    "PreOrder",
    "PreOrderItem",
    "Reservation",
    "RestaurantTable",
    "User",
    # Session
    "engine",
    "SessionLocal",
    "create_engine",
    "create_session_factory",
    "get_session",
    "init_db",
    "close_db",
]
