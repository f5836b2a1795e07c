"""
Per-store publish/subscribe channel.

Each store owns one ChangeFeed and publishes after a mutation has fully
completed, so a subscriber always observes a consistent store.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    """
    A single store mutation.

    kind is the mutation verb ("added", "updated", "removed", "pushed",
    "read"); payload carries the affected model (or None).
    """
    source: str
    kind: str
    entity_id: str
    payload: Optional[Any] = None
    extra: Dict[str, Any] = field(default_factory=dict)


Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    """
    Ordered list of subscribers for one store.

    A failing subscriber is logged and skipped; it never undoes the
    mutation that has already been committed, and never stops delivery
    to the remaining subscribers.
    """

    def __init__(self, source: str):
        self.source = source
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def publish(self, kind: str, entity_id: str, payload: Any = None, **extra) -> ChangeEvent:
        event = ChangeEvent(source=self.source, kind=kind, entity_id=entity_id, payload=payload, extra=extra)
        # Copy so subscribers may unsubscribe during delivery
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.warning(
                    f"Subscriber {getattr(callback, '__qualname__', callback)} failed on "
                    f"{self.source}.{kind} ({entity_id}): {e}",
                    exc_info=True,
                )
        return event

    def __len__(self) -> int:
        return len(self._subscribers)
