from .address import Address
from .seller import SellerApplication
from .user import CustomUser

__all__ = [
    "CustomUser",
    "Address",
    "SellerApplication",
]
