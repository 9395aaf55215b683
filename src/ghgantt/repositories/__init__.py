"""Local storage backends."""

from .filesystem import (
    CommentsRepository,
    StoreError,
    StoreNotFoundError,
    SyncStateRepository,
    TasksRepository,
)
from .protocol import StoreProtocol

__all__ = [
    "CommentsRepository",
    "StoreError",
    "StoreNotFoundError",
    "StoreProtocol",
    "SyncStateRepository",
    "TasksRepository",
]
