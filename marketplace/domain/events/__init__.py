from infrastructure.events.domain_event import DomainEvent

from .order_events import OrderCancelledEvent, OrderPlacedEvent, OrderStatusChangedEvent
from .product_events import ProductApprovedEvent, ProductRejectedEvent, ProductSubmittedEvent


__all__ = [
    "DomainEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
    "OrderCancelledEvent",
    "ProductSubmittedEvent",
    "ProductApprovedEvent",
    "ProductRejectedEvent",
]
