from infrastructure.events.domain_event import DomainEvent

from .seller_events import SellerApplicationReviewedEvent, SellerApplicationSubmittedEvent, UserRegisteredEvent

__all__ = [
    "DomainEvent",
    "UserRegisteredEvent",
    "SellerApplicationSubmittedEvent",
    "SellerApplicationReviewedEvent",
]
