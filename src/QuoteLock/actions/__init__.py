"""User actions: refresh trigger, collection requests and rail gestures."""

from __future__ import annotations

from QuoteLock.actions.channels import (
    CollectionChannel,
    LocalCollectionChannel,
    LocalRefreshChannel,
    RefreshChannel,
)
from QuoteLock.actions.dispatcher import ActionDispatcher

__all__ = [
    "ActionDispatcher",
    "CollectionChannel",
    "LocalCollectionChannel",
    "LocalRefreshChannel",
    "RefreshChannel",
]
