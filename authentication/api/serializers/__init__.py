from .address_serializers import AddressSerializer
from .auth_serializers import LoginUserSerializer, UserRegistrationSerializer, UserSerializer, UserUpdateSerializer
from .seller_serializers import (
    RejectApplicationSerializer,
    SellerApplicationAdminSerializer,
    SellerApplicationSerializer,
)


__all__ = [
    "UserSerializer",
    "UserUpdateSerializer",
    "LoginUserSerializer",
    "UserRegistrationSerializer",
    "AddressSerializer",
    "SellerApplicationSerializer",
    "SellerApplicationAdminSerializer",
    "RejectApplicationSerializer",
]
