import logging
from typing import Callable, Dict, List

from django.utils import timezone

from .event_bus_interface import EventBus


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """Synchronous event bus used by tests and single-process development.

    Handlers run inline during ``publish`` and receive the same envelope the
    Redis bus delivers. Every published envelope is kept in ``published``.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self.published: List[dict] = []

    def publish(self, event_type: str, payload: dict):
        envelope = {"event_type": event_type, "occurred_at": timezone.now().isoformat(), "payload": payload}
        self.published.append(envelope)
        logger.debug(f"Published in-memory event: {event_type}")

        for handler in self._subscribers.get(event_type, []):
            try:
                handler(envelope)
            except Exception as e:
                logger.error(f"Handler error for {event_type}: {e}", exc_info=True)

    def subscribe(self, event_type: str, handler: Callable):
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def events_of_type(self, event_type: str) -> List[dict]:
        return [e for e in self.published if e["event_type"] == event_type]

    def clear(self):
        self.published.clear()
