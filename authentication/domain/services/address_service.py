"""
AddressService - Saved addresses of a user.

Keeps at most one default address per user and address type, and formats
addresses into the single-line string stored on orders.
"""

from typing import Dict, List

from django.db import transaction

from authentication.domain.models import Address
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


EDITABLE_FIELDS = (
    "title",
    "full_name",
    "phone",
    "address_line1",
    "address_line2",
    "district",
    "city",
    "postal_code",
    "country",
    "address_type",
    "is_default",
)


class AddressService(BaseService):
    """
    Service for a user's address book.

    Ownership failures answer ``not_address_owner``; ids that do not exist
    answer ``address_not_found``.
    """

    def list_addresses(self, user, address_type: str = None) -> ServiceResult[List[Address]]:
        try:
            queryset = Address.objects.filter(user=user)
            if address_type:
                queryset = queryset.filter(address_type=address_type)
            return service_ok(list(queryset.order_by("-is_default", "-created_at")))
        except Exception as e:
            self.logger.error(f"Error listing addresses for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def create_address(self, user, data: Dict) -> ServiceResult[Address]:
        """
        Create an address for the user.

        The first address of a type becomes the default. Creating with
        ``is_default=True`` clears the previous default of that type.
        """
        try:
            fields = {name: data[name] for name in EDITABLE_FIELDS if name in data}
            address_type = fields.get("address_type", "shipping")
            fields["address_type"] = address_type

            has_any = Address.objects.filter(user=user, address_type=address_type).exists()
            if not has_any:
                fields["is_default"] = True
            elif fields.get("is_default"):
                self._clear_default(user, address_type)

            address = Address.objects.create(user=user, **fields)
            self.logger.info(f"Address {address.id} created for user {user.id} (default={address.is_default})")
            return service_ok(address)

        except Exception as e:
            self.logger.error(f"Error creating address for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    @transaction.atomic
    def update_address(self, user, address_id, data: Dict) -> ServiceResult[Address]:
        result = self.get_owned_address(user, address_id)
        if not result.ok:
            return result
        address = result.value

        try:
            for name in EDITABLE_FIELDS:
                if name in data:
                    setattr(address, name, data[name])

            if address.is_default:
                self._clear_default(user, address.address_type, exclude_id=address.id)

            address.save()
            return service_ok(address)

        except Exception as e:
            self.logger.error(f"Error updating address {address_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def delete_address(self, user, address_id) -> ServiceResult[None]:
        result = self.get_owned_address(user, address_id)
        if not result.ok:
            return result

        result.value.delete()
        self.logger.info(f"Address {address_id} deleted by user {user.id}")
        return service_ok()

    @BaseService.log_performance
    @transaction.atomic
    def set_default(self, user, address_id) -> ServiceResult[Address]:
        result = self.get_owned_address(user, address_id)
        if not result.ok:
            return result
        address = result.value

        self._clear_default(user, address.address_type, exclude_id=address.id)
        if not address.is_default:
            address.is_default = True
            address.save(update_fields=["is_default", "updated_at"])
        return service_ok(address)

    def get_owned_address(self, user, address_id) -> ServiceResult[Address]:
        """Fetch an address, checking that it belongs to ``user``."""
        try:
            address = Address.objects.get(id=address_id)
        except (Address.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.ADDRESS_NOT_FOUND, f"Address {address_id} not found")

        if str(address.user_id) != str(user.id):
            self.logger.warning(f"User {user.id} tried to use address {address_id} of another user")
            return service_err(ErrorCodes.NOT_ADDRESS_OWNER, "This address does not belong to you")

        return service_ok(address)

    @staticmethod
    def format_address(address: Address) -> str:
        """Single-line address: non-blank parts joined with ", "."""
        return address.as_single_line()

    def _clear_default(self, user, address_type: str, exclude_id=None):
        queryset = Address.objects.filter(user=user, address_type=address_type, is_default=True)
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        queryset.update(is_default=False)
