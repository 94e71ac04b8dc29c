from .coupon import Coupon, CouponRedemption, UserCoupon

__all__ = ["Coupon", "UserCoupon", "CouponRedemption"]
