from dataclasses import dataclass

from infrastructure.events.domain_event import DomainEvent


@dataclass
class UserRegisteredEvent(DomainEvent):
    def __init__(self, user_id: str, email: str):
        super().__init__(event_type="user.registered", payload={"user_id": user_id, "email": email})


@dataclass
class SellerApplicationSubmittedEvent(DomainEvent):
    """Event: Seller application submitted or resubmitted after a rejection."""

    def __init__(self, application_id: int, user_id: str, store_name: str, is_resubmission: bool):
        super().__init__(
            event_type="seller_application.submitted",
            payload={
                "application_id": application_id,
                "user_id": user_id,
                "store_name": store_name,
                "is_resubmission": is_resubmission,
            },
        )


@dataclass
class SellerApplicationReviewedEvent(DomainEvent):
    """Event: Seller application approved or rejected by an admin."""

    def __init__(self, application_id: int, user_id: str, status: str, admin_id: str, store_id: str = None):
        super().__init__(
            event_type="seller_application.reviewed",
            payload={
                "application_id": application_id,
                "user_id": user_id,
                "status": status,
                "admin_id": admin_id,
                "store_id": store_id,
            },
        )
