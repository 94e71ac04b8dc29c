"""
InventoryService - Stock Management

Handles product stock decrements, restores and availability checks.
Decrements are a single conditional UPDATE so concurrent orders can never
drive stock below zero, without holding row locks across the order sequence.
"""

import logging

from django.db.models import F

from marketplace.catalog.domain.models.catalog import Product
from marketplace.infra.observability.metrics import stock_decrement_failures
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


logger = logging.getLogger(__name__)


class InventoryService(BaseService):
    """
    Service for managing product inventory.
    """

    @BaseService.log_performance
    def check_availability(self, product_id, quantity: int = 1) -> ServiceResult[bool]:
        """
        Check if a product has sufficient stock available.

        Args:
            product_id: UUID of the product
            quantity: Quantity to check (default: 1)

        Returns:
            ServiceResult with True if available, False otherwise

        Example:
            >>> result = inventory_service.check_availability(product_id, 5)
            >>> if result.ok and result.value:
            ...     print("Product is in stock!")
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            product = Product.objects.get(id=product_id, is_active=True)

            available = product.stock_quantity >= quantity

            self.logger.info(
                f"Availability check for product {product_id}: "
                f"requested={quantity}, available={product.stock_quantity}, result={available}"
            )

            return service_ok(available)

        except Product.DoesNotExist:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        except Exception as e:
            self.logger.error(f"Error checking availability for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_stock_level(self, product_id) -> ServiceResult[int]:
        try:
            stock = Product.objects.values_list("stock_quantity", flat=True).get(id=product_id)
            return service_ok(stock)
        except Product.DoesNotExist:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
        except Exception as e:
            self.logger.error(f"Error reading stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def decrement_stock(self, product_id, quantity: int) -> ServiceResult[int]:
        """
        Atomically take ``quantity`` units out of stock.

        Runs ``UPDATE ... SET stock_quantity = stock_quantity - qty WHERE id = ... AND
        stock_quantity >= qty``. When no row matches, stock is untouched and
        ``insufficient_stock`` is returned.

        Returns:
            ServiceResult with the quantity decremented
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            updated = Product.objects.filter(id=product_id, stock_quantity__gte=quantity).update(
                stock_quantity=F("stock_quantity") - quantity
            )
        except Exception as e:
            stock_decrement_failures.inc()
            self.logger.error(f"Error decrementing stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        if updated == 0:
            stock_decrement_failures.inc()
            if not Product.objects.filter(id=product_id).exists():
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
            return service_err(
                ErrorCodes.INSUFFICIENT_STOCK, f"Insufficient stock for product {product_id} (requested {quantity})"
            )

        self.logger.info(f"Stock decremented: product={product_id}, quantity={quantity}")
        return service_ok(quantity)

    @BaseService.log_performance
    def restore_stock(self, product_id, quantity: int, reason: str = "order_cancelled") -> ServiceResult[int]:
        """
        Put ``quantity`` units back into stock.

        Used by order compensation, cancellations and expired orders.

        Args:
            product_id: UUID of the product
            quantity: Quantity to restore
            reason: Reason for the restore (for audit logging)
        """
        if quantity <= 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Quantity must be positive")

        try:
            updated = Product.objects.filter(id=product_id).update(stock_quantity=F("stock_quantity") + quantity)
        except Exception as e:
            self.logger.error(f"Error restoring stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        if updated == 0:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

        self.logger.info(f"Stock restored: product={product_id}, quantity={quantity}, reason={reason}")
        return service_ok(quantity)

    @BaseService.log_performance
    def update_stock(self, product_id, quantity: int, operation: str = "set") -> ServiceResult[int]:
        """
        Update product stock quantity (seller/admin operation).

        Args:
            product_id: UUID of the product
            quantity: Quantity value
            operation: 'set' or 'add'

        Returns:
            ServiceResult with the new stock level
        """
        if operation not in ["set", "add"]:
            return service_err(ErrorCodes.INVALID_INPUT, "Operation must be 'set' or 'add'")
        if quantity < 0:
            return service_err(ErrorCodes.INVALID_QUANTITY, "Stock quantity cannot be negative")

        try:
            queryset = Product.objects.filter(id=product_id)
            if operation == "set":
                updated = queryset.update(stock_quantity=quantity)
            else:
                updated = queryset.update(stock_quantity=F("stock_quantity") + quantity)

            if updated == 0:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

            return self.get_stock_level(product_id)

        except Exception as e:
            self.logger.error(f"Error updating stock for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))
