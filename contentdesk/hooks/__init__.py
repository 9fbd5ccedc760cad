"""Collection lifecycle hooks."""
from contentdesk.hooks.dispatcher import AFTER_CHANGE, BEFORE_CHANGE, HookDispatcher
from contentdesk.hooks.collections import register_collection_hooks

__all__ = [
    "AFTER_CHANGE",
    "BEFORE_CHANGE",
    "HookDispatcher",
    "register_collection_hooks",
]
