from authentication.domain.models.address import Address
from authentication.domain.models.seller import SellerApplication
from authentication.domain.models.user import CustomUser


__all__ = [
    "CustomUser",
    "Address",
    "SellerApplication",
]
