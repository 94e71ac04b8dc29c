"""
Base classes and utilities for the service layer.

This module provides the ServiceResult pattern (inspired by Rust's Result type)
and the BaseService class shared by every app's domain services.
"""

import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Expected failures (missing rows, permission problems, business rule
    violations) are returned, never raised.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code from ErrorCodes (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)

    Examples:
        >>> result = service_ok(order)
        >>> if result.ok:
        ...     return Response(OrderSerializer(result.value).data, 201)

        >>> result = service_err(ErrorCodes.PRICE_MISMATCH, "Price changed for 'Lamp'")
        >>> print(result.error)  # "price_mismatch"
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None

    def map(self, func: Callable[[T], Any]) -> "ServiceResult":
        """Transform the success value if ok=True, otherwise pass through the error."""
        if self.ok:
            return service_ok(func(self.value))
        return self

    def flat_map(self, func: Callable[[T], "ServiceResult"]) -> "ServiceResult":
        """Chain service operations that return ServiceResult."""
        if self.ok:
            return func(self.value)
        return self

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with 'success' and either 'data' or 'error'
        """
        if self.ok:
            return {"success": True, "data": self.value}
        return {
            "success": False,
            "error": {"code": self.error, "message": self.error_detail},
        }


def service_ok(value: T = None) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Example:
        >>> return service_ok(product)
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "") -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g., "product_not_found", "insufficient_stock")
        error_detail: Human-readable error message

    Example:
        >>> return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error)


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class OrderService(BaseService):
            def __init__(self, inventory_service):
                super().__init__()
                self.inventory_service = inventory_service

            @BaseService.log_performance
            def place_order(self, user, data):
                self.logger.info(f"Placing order for user {user.id}")
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log duration and outcome of service methods.

        Example:
            @BaseService.log_performance
            def expensive_operation(self):
                ...
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


class ErrorCodes:
    """Standard error codes used across services."""

    # Product errors
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"
    PRODUCT_NOT_PENDING = "product_not_pending"
    PRICE_MISMATCH = "price_mismatch"
    REJECTION_REASON_REQUIRED = "rejection_reason_required"

    # Store errors
    STORE_NOT_FOUND = "store_not_found"
    STORE_MISMATCH = "store_mismatch"
    NOT_STORE_OWNER = "not_store_owner"

    # Category errors
    CATEGORY_NOT_FOUND = "category_not_found"

    # Cart errors
    CART_EMPTY = "cart_empty"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"

    # Order errors
    ORDER_NOT_FOUND = "order_not_found"
    ORDER_ALREADY_EXISTS = "order_already_exists"
    ORDER_CANNOT_CANCEL = "order_cannot_cancel"
    INVALID_ORDER_STATE = "invalid_order_state"
    TOTAL_MISMATCH = "total_mismatch"
    NOT_ORDER_OWNER = "not_order_owner"

    # Coupon errors
    COUPON_NOT_FOUND = "coupon_not_found"
    COUPON_EXISTS = "coupon_exists"
    COUPON_INVALID = "coupon_invalid"
    COUPON_NOT_APPLICABLE = "coupon_not_applicable"
    COUPON_ALREADY_CLAIMED = "coupon_already_claimed"
    COUPON_USAGE_LIMIT = "coupon_usage_limit"

    # Announcement errors
    ANNOUNCEMENT_NOT_FOUND = "announcement_not_found"

    # Address errors
    ADDRESS_NOT_FOUND = "address_not_found"
    ADDRESS_REQUIRED = "address_required"
    NOT_ADDRESS_OWNER = "not_address_owner"

    # Inventory errors
    INSUFFICIENT_STOCK = "insufficient_stock"

    # Seller onboarding errors
    APPLICATION_EXISTS = "application_exists"
    APPLICATION_NOT_FOUND = "application_not_found"
    ALREADY_SELLER = "already_seller"
    APPLICATIONS_CLOSED = "applications_closed"

    # Review / question errors
    REVIEW_NOT_FOUND = "review_not_found"
    REVIEW_EXISTS = "review_exists"
    QUESTION_NOT_FOUND = "question_not_found"

    # Notification errors
    NOTIFICATION_NOT_FOUND = "notification_not_found"

    # User errors
    USER_NOT_FOUND = "user_not_found"
    REGISTRATION_CLOSED = "registration_closed"

    # Permission errors
    PERMISSION_DENIED = "permission_denied"

    # Validation errors
    VALIDATION_ERROR = "validation_error"
    INVALID_INPUT = "invalid_input"

    # Internal errors
    INTERNAL_ERROR = "internal_error"


NOT_FOUND_CODES = {
    ErrorCodes.PRODUCT_NOT_FOUND,
    ErrorCodes.STORE_NOT_FOUND,
    ErrorCodes.CATEGORY_NOT_FOUND,
    ErrorCodes.ORDER_NOT_FOUND,
    ErrorCodes.ADDRESS_NOT_FOUND,
    ErrorCodes.APPLICATION_NOT_FOUND,
    ErrorCodes.REVIEW_NOT_FOUND,
    ErrorCodes.QUESTION_NOT_FOUND,
    ErrorCodes.NOTIFICATION_NOT_FOUND,
    ErrorCodes.USER_NOT_FOUND,
    ErrorCodes.ITEM_NOT_IN_CART,
    ErrorCodes.COUPON_NOT_FOUND,
    ErrorCodes.ANNOUNCEMENT_NOT_FOUND,
}

FORBIDDEN_CODES = {
    ErrorCodes.PERMISSION_DENIED,
    ErrorCodes.NOT_STORE_OWNER,
    ErrorCodes.NOT_ORDER_OWNER,
    ErrorCodes.NOT_ADDRESS_OWNER,
    ErrorCodes.REGISTRATION_CLOSED,
    ErrorCodes.APPLICATIONS_CLOSED,
}

CONFLICT_CODES = {
    ErrorCodes.ORDER_ALREADY_EXISTS,
    ErrorCodes.APPLICATION_EXISTS,
    ErrorCodes.ALREADY_SELLER,
    ErrorCodes.REVIEW_EXISTS,
    ErrorCodes.COUPON_EXISTS,
    ErrorCodes.COUPON_ALREADY_CLAIMED,
}


def http_status_for(error_code: str) -> int:
    """Map a service error code to the HTTP status the API answers with."""
    if error_code in NOT_FOUND_CODES:
        return 404
    if error_code in FORBIDDEN_CODES:
        return 403
    if error_code in CONFLICT_CODES:
        return 409
    if error_code == ErrorCodes.INTERNAL_ERROR:
        return 500
    return 400
