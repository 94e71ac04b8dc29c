from .address_views import AddressViewSet
from .auth_views import LoginAPIView, MeAPIView, RegisterAPIView
from .seller_views import SellerApplicationCreateView, SellerApplicationStatusView


__all__ = [
    "LoginAPIView",
    "RegisterAPIView",
    "MeAPIView",
    "AddressViewSet",
    "SellerApplicationCreateView",
    "SellerApplicationStatusView",
]
