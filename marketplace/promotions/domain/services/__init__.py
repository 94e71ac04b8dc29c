from .coupon_service import CouponService


__all__ = ["CouponService"]
