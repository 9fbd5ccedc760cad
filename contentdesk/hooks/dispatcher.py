"""
Hook dispatcher coordinating collection lifecycle events.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List

BEFORE_CHANGE = "before_change"
AFTER_CHANGE = "after_change"
PHASES = (BEFORE_CHANGE, AFTER_CHANGE)

HookHandler = Callable[..., Any]


class HookDispatcher:
    """
    Maintains per-collection hook handlers for each write phase.

    Handlers are called in registration order with the payload as the first
    positional argument and ``operation`` ("create" or "update") plus any
    extra context as keyword arguments. A handler that returns something
    other than ``None`` replaces the payload seen by the next handler.
    Exceptions propagate to the caller, so a raising before-change handler
    aborts the write.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, Dict[str, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def register(self, collection: str, phase: str, handler: HookHandler) -> None:
        if phase not in PHASES:
            raise ValueError(f"Unknown hook phase: {phase}")
        self._handlers[collection][phase].append(handler)

    def handlers(self, collection: str, phase: str) -> List[HookHandler]:
        return list(self._handlers.get(collection, {}).get(phase, []))

    def run(self, slug: str, phase: str, payload: Dict[str, Any], **context: Any) -> Dict[str, Any]:
        """Run the handlers registered for ``slug`` and ``phase``; they also receive ``collection=slug``."""
        for handler in self.handlers(slug, phase):
            result = handler(payload, collection=slug, **context)
            if result is not None:
                payload = result
        return payload

    def before_change(self, collection: str, data: Dict[str, Any], operation: str, **context: Any) -> Dict[str, Any]:
        return self.run(collection, BEFORE_CHANGE, data, operation=operation, **context)

    def after_change(self, collection: str, doc: Dict[str, Any], operation: str, **context: Any) -> Dict[str, Any]:
        return self.run(collection, AFTER_CHANGE, doc, operation=operation, **context)

    def clear(self) -> None:
        self._handlers.clear()
