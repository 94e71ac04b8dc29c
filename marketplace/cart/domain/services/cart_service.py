"""
CartService - Shopping Cart Operations

Handles shopping cart operations including add, remove, update, and clear.
Validates stock availability and calculates totals using InventoryService and PricingService.
"""

import logging
from typing import Dict

from django.db import transaction

from marketplace.cart.domain.models import Cart, CartItem
from marketplace.catalog.domain.models import Product
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .inventory_service import InventoryService
from .pricing_service import PricingService


logger = logging.getLogger(__name__)


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Responsibilities:
    - Get user's cart
    - Add items to cart (with stock validation)
    - Remove items from cart
    - Update item quantities
    - Clear cart

    Dependencies:
    - InventoryService: Check stock availability
    - PricingService: Calculate cart totals
    """

    def __init__(self, inventory_service: InventoryService = None, pricing_service: PricingService = None):
        """
        Initialize CartService.

        Args:
            inventory_service: Service for stock management (injected)
            pricing_service: Service for price calculations (injected)
        """
        super().__init__()
        self.inventory_service = inventory_service or InventoryService()
        self.pricing_service = pricing_service or PricingService()

    @BaseService.log_performance
    def get_cart(self, user) -> ServiceResult[Dict]:
        """
        Get user's shopping cart with items and totals.

        Returns:
            ServiceResult with cart data: ``items`` (product, quantity, unit_price,
            line_total), ``items_count``, ``totals``

        Example:
            >>> result = cart_service.get_cart(user)
            >>> if result.ok:
            ...     total = result.value["totals"]["subtotal"]
        """
        try:
            cart, _ = Cart.objects.get_or_create(user=user)
            cart_items = list(
                cart.items.select_related("product", "product__store").prefetch_related("product__images")
            )

            items_data = []
            for cart_item in cart_items:
                unit_price = self.pricing_service.effective_price(cart_item.product)
                items_data.append(
                    {
                        "id": cart_item.id,
                        "product": cart_item.product,
                        "quantity": cart_item.quantity,
                        "unit_price": unit_price,
                        "line_total": self.pricing_service.line_total(unit_price, cart_item.quantity),
                        "added_at": cart_item.added_at,
                    }
                )

            totals_result = self.pricing_service.calculate_cart_total(cart_items)
            if not totals_result.ok:
                self.logger.warning(f"Failed to calculate cart totals for user {user.id}: {totals_result.error}")
                totals = {}
            else:
                totals = totals_result.value

            return service_ok(
                {
                    "id": cart.id,
                    "user_id": user.id,
                    "items": items_data,
                    "items_count": len(items_data),
                    "totals": totals,
                    "created_at": cart.created_at,
                    "updated_at": cart.updated_at,
                }
            )

        except Exception as e:
            self.logger.error(f"Error getting cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def add_to_cart(self, user, product_id, quantity: int = 1) -> ServiceResult[Dict]:
        """
        Add item to cart (with stock validation).

        Only approved, active products can be added.

        Example:
            >>> result = cart_service.add_to_cart(user, product_id, quantity=2)
        """
        try:
            if quantity <= 0:
                return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

            try:
                product = Product.objects.get(id=product_id)
            except Product.DoesNotExist:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            if not product.is_publicly_visible:
                return service_err(ErrorCodes.PRODUCT_INACTIVE, f"{product.name} is not available")

            cart, _ = Cart.objects.get_or_create(user=user)
            cart_item = CartItem.objects.filter(cart=cart, product=product).first()
            new_quantity = quantity + (cart_item.quantity if cart_item else 0)

            if product.stock_quantity < new_quantity:
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {product.name}. Available: {product.stock_quantity}",
                )

            if cart_item:
                cart_item.quantity = new_quantity
                cart_item.save(update_fields=["quantity"])
                self.logger.info(f"Updated cart item for user {user.id}: {product.name} quantity -> {new_quantity}")
            else:
                CartItem.objects.create(cart=cart, product=product, quantity=quantity)
                self.logger.info(f"Added to cart for user {user.id}: {quantity}x {product.name}")

            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error adding to cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def remove_from_cart(self, user, product_id) -> ServiceResult[Dict]:
        try:
            deleted, _ = CartItem.objects.filter(cart__user=user, product_id=product_id).delete()
            if not deleted:
                return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

            self.logger.info(f"Removed product {product_id} from cart of user {user.id}")
            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error removing from cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_quantity(self, user, product_id, quantity: int) -> ServiceResult[Dict]:
        """
        Update quantity of item in cart.

        Args:
            user: User updating the quantity
            product_id: Product UUID
            quantity: New quantity (must be > 0)
        """
        try:
            if quantity <= 0:
                return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

            try:
                cart_item = CartItem.objects.select_related("product").get(cart__user=user, product_id=product_id)
            except CartItem.DoesNotExist:
                return service_err(ErrorCodes.ITEM_NOT_IN_CART, f"Product {product_id} not in cart")

            stock_check = self.inventory_service.check_availability(product_id, quantity)
            if not stock_check.ok:
                return stock_check

            if not stock_check.value:
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock. Requested: {quantity}, Available: {cart_item.product.stock_quantity}",
                )

            old_quantity = cart_item.quantity
            cart_item.quantity = quantity
            cart_item.save(update_fields=["quantity"])

            self.logger.info(
                f"Updated cart quantity for user {user.id}: {cart_item.product.name} {old_quantity} -> {quantity}"
            )

            return self.get_cart(user)

        except Exception as e:
            self.logger.error(f"Error updating cart quantity for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def clear_cart(self, user) -> ServiceResult[int]:
        """Remove every item from the user's cart, returning how many were removed."""
        try:
            deleted, _ = CartItem.objects.filter(cart__user=user).delete()
            self.logger.info(f"Cleared cart for user {user.id}: {deleted} items removed")
            return service_ok(deleted)

        except Exception as e:
            self.logger.error(f"Error clearing cart for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
