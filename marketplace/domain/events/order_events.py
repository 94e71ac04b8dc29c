from dataclasses import dataclass
from decimal import Decimal

from infrastructure.events.domain_event import DomainEvent


@dataclass
class OrderPlacedEvent(DomainEvent):
    """Event: Order placed."""

    def __init__(self, order_id: str, user_id: str, store_id: str, total_amount: Decimal, item_count: int):
        super().__init__(
            event_type="order.placed",
            payload={
                "order_id": order_id,
                "user_id": user_id,
                "store_id": store_id,
                "total_amount": str(total_amount),
                "item_count": item_count,
            },
        )


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Event: Order status changed by a seller, admin or buyer request."""

    def __init__(self, order_id: str, user_id: str, old_status: str, new_status: str, changed_by: str):
        super().__init__(
            event_type="order.status_changed",
            payload={
                "order_id": order_id,
                "user_id": user_id,
                "old_status": old_status,
                "new_status": new_status,
                "changed_by": changed_by,
            },
        )


@dataclass
class OrderCancelledEvent(DomainEvent):
    """Event: Order cancelled."""

    def __init__(self, order_id: str, user_id: str, reason: str, payment_status: str):
        super().__init__(
            event_type="order.cancelled",
            payload={
                "order_id": order_id,
                "user_id": user_id,
                "reason": reason,
                "payment_status": payment_status,
            },
        )
