from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .api.views import (
    AddressViewSet,
    LoginAPIView,
    MeAPIView,
    RegisterAPIView,
    SellerApplicationCreateView,
    SellerApplicationStatusView,
)

router = DefaultRouter()
router.register(r"addresses", AddressViewSet, basename="address")

urlpatterns = [
    path("register/", RegisterAPIView.as_view(), name="register"),
    path("login/", LoginAPIView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", MeAPIView.as_view(), name="me"),
    # Seller application endpoints
    path("seller/apply/", SellerApplicationCreateView.as_view(), name="seller_apply"),
    path("seller/status/", SellerApplicationStatusView.as_view(), name="seller_status"),
    path("", include(router.urls)),
]
