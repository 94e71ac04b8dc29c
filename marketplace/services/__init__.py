"""
Marketplace Service Layer

This package re-exports the marketplace domain services, which live next to
their models under ``catalog``, ``cart`` and ``ordering``.

Services:
- CatalogService: Product browsing and CRUD, categories, stores
- ApprovalService: Product approval workflow
- ReviewService: Product reviews and responses
- QuestionService: Product questions and answers
- CartService: Shopping cart operations
- InventoryService: Atomic stock decrement / restore
- PricingService: Effective prices, totals and commission
- OrderService: Order placement and management
- CouponService: Coupons, claims and checkout discounts

Usage:
    from infrastructure.container import container

    result = container.order_service().place_order(request.user, data)

    if result.ok:
        order = result.value
    else:
        error = result.error
"""

from marketplace.cart.domain.services import CartService, InventoryService, PricingService
from marketplace.catalog.domain.services import ApprovalService, CatalogService, QuestionService, ReviewService
from marketplace.ordering.domain.services import OrderService
from marketplace.promotions.domain.services import CouponService
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    # Error codes
    "ErrorCodes",
    # Services
    "ApprovalService",
    "CatalogService",
    "CartService",
    "CouponService",
    "InventoryService",
    "OrderService",
    "PricingService",
    "QuestionService",
    "ReviewService",
]
