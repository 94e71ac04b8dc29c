import logging

from django.conf import settings

from .domain_event import DomainEvent
from .event_bus_interface import EventBus
from .in_memory_event_bus import InMemoryEventBus
from .redis_event_bus import RedisEventBus


logger = logging.getLogger(__name__)

# Singleton instance
_event_bus_instance = None


def get_event_bus() -> EventBus:
    """Get singleton event bus instance, chosen by INFRASTRUCTURE['EVENT_BUS_BACKEND']."""
    global _event_bus_instance
    if _event_bus_instance is None:
        backend = getattr(settings, "INFRASTRUCTURE", {}).get("EVENT_BUS_BACKEND", "redis")
        if backend == "memory":
            _event_bus_instance = InMemoryEventBus()
        elif backend == "redis":
            _event_bus_instance = RedisEventBus()
        else:
            raise ValueError(f"Invalid event bus backend: {backend}. Must be 'redis' or 'memory'")
        logger.info(f"Created event bus: {type(_event_bus_instance).__name__}")
    return _event_bus_instance


__all__ = ["DomainEvent", "EventBus", "InMemoryEventBus", "RedisEventBus", "get_event_bus"]
