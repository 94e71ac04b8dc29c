# Marketplace API Serializers

# Import request/response serializers for API documentation
from .response_serializers import (
    AddToCartRequestSerializer,
    BulkModerationRequestSerializer,
    BulkModerationResponseSerializer,
    CreateOrderRequestSerializer,
    CreateReviewRequestSerializer,
    ErrorResponseSerializer,
    FeatureProductRequestSerializer,
    ModerateQuestionRequestSerializer,
    PaginatedResponseSerializer,
    RejectProductRequestSerializer,
    RemoveFromCartRequestSerializer,
    TextRequestSerializer,
    UpdateCartRequestSerializer,
    UpdateOrderRequestSerializer,
)


__all__ = [
    "ErrorResponseSerializer",
    "PaginatedResponseSerializer",
    "RejectProductRequestSerializer",
    "BulkModerationRequestSerializer",
    "BulkModerationResponseSerializer",
    "FeatureProductRequestSerializer",
    "AddToCartRequestSerializer",
    "UpdateCartRequestSerializer",
    "RemoveFromCartRequestSerializer",
    "CreateOrderRequestSerializer",
    "UpdateOrderRequestSerializer",
    "CreateReviewRequestSerializer",
    "TextRequestSerializer",
    "ModerateQuestionRequestSerializer",
]
