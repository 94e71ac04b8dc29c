from .catalog import Product, ProductImage
from .category import Category
from .interaction import ProductAnswer, ProductQuestion, ProductReview, ReviewResponse
from .store import Store

__all__ = [
    "Category",
    "Store",
    "Product",
    "ProductImage",
    "ProductReview",
    "ReviewResponse",
    "ProductQuestion",
    "ProductAnswer",
]
