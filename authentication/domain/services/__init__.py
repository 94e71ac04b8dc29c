"""
Business logic services for authentication.

Services encapsulate business rules and coordinate between
infrastructure (events, notifications) and domain models.
"""

from .address_service import AddressService
from .auth_service import AuthService
from .results import LoginResult, RegisterResult
from .seller_service import SellerService

__all__ = [
    "AddressService",
    "AuthService",
    "SellerService",
    "LoginResult",
    "RegisterResult",
]
