from .cart import Cart, CartItem

__all__ = ["Cart", "CartItem"]
