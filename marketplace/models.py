from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import (
    Category,
    Product,
    ProductAnswer,
    ProductImage,
    ProductQuestion,
    ProductReview,
    ReviewResponse,
    Store,
)
from marketplace.ordering.domain.models import Order, OrderItem
from marketplace.promotions.domain.models import Coupon, CouponRedemption, UserCoupon


__all__ = [
    "Category",
    "Store",
    "Product",
    "ProductImage",
    "ProductReview",
    "ReviewResponse",
    "ProductQuestion",
    "ProductAnswer",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "Coupon",
    "UserCoupon",
    "CouponRedemption",
]
