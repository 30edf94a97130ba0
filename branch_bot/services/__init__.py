"""
Services Package.

Stateful collaborators around the pure core in branch_bot.tasks:
- session: SessionStore, write-through persistence of recommendation sessions
- order: OrderService, cache -> matcher -> pricing for ordering messages
"""

from .order import OrderService
from .session import SessionStore

__all__ = [
    "OrderService",
    "SessionStore",
]
