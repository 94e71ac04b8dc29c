from dataclasses import dataclass

from infrastructure.events.domain_event import DomainEvent


@dataclass
class ProductSubmittedEvent(DomainEvent):
    """Event: Product submitted (or resubmitted) for moderation."""

    def __init__(self, product_id: str, store_id: str, seller_id: str, is_resubmission: bool = False):
        super().__init__(
            event_type="product.submitted",
            payload={
                "product_id": product_id,
                "store_id": store_id,
                "seller_id": seller_id,
                "is_resubmission": is_resubmission,
            },
        )


@dataclass
class ProductApprovedEvent(DomainEvent):
    def __init__(self, product_id: str, seller_id: str, admin_id: str):
        super().__init__(
            event_type="product.approved",
            payload={"product_id": product_id, "seller_id": seller_id, "admin_id": admin_id},
        )


@dataclass
class ProductRejectedEvent(DomainEvent):
    def __init__(self, product_id: str, seller_id: str, admin_id: str, reason: str):
        super().__init__(
            event_type="product.rejected",
            payload={"product_id": product_id, "seller_id": seller_id, "admin_id": admin_id, "reason": reason},
        )
