import pytest

from authentication.domain.services import AddressService
from authentication.models import Address
from authentication.tests.factories import AddressFactory, UserFactory
from utils.service_base import ErrorCodes


ADDRESS = {
    "title": "Office",
    "full_name": "Mehmet Demir",
    "phone": "+90 532 000 0000",
    "address_line1": "Büyükdere Cad. 100",
    "district": "Şişli",
    "city": "İstanbul",
    "postal_code": "34394",
    "country": "Türkiye",
}


@pytest.mark.unit
@pytest.mark.django_db
class TestAddressService:
    def setup_method(self):
        self.service = AddressService()
        self.user = UserFactory()

    def test_first_address_of_type_becomes_default(self):
        result = self.service.create_address(self.user, ADDRESS)

        assert result.ok
        assert result.value.is_default is True
        assert result.value.address_type == "shipping"

    def test_second_address_is_not_default(self):
        self.service.create_address(self.user, ADDRESS)

        result = self.service.create_address(self.user, {**ADDRESS, "title": "Home"})

        assert result.value.is_default is False

    def test_new_default_clears_previous(self):
        first = self.service.create_address(self.user, ADDRESS).value

        second = self.service.create_address(self.user, {**ADDRESS, "is_default": True}).value

        assert second.is_default is True
        assert Address.objects.get(id=first.id).is_default is False

    def test_defaults_are_per_type(self):
        self.service.create_address(self.user, ADDRESS)

        billing = self.service.create_address(self.user, {**ADDRESS, "address_type": "billing"}).value

        assert billing.is_default is True
        assert Address.objects.filter(user=self.user, is_default=True).count() == 2

    def test_list_filters_by_type(self):
        AddressFactory(user=self.user)
        AddressFactory(user=self.user, address_type="billing")
        AddressFactory()

        assert len(self.service.list_addresses(self.user).value) == 2
        assert len(self.service.list_addresses(self.user, "billing").value) == 1

    def test_update_own_address(self):
        address = AddressFactory(user=self.user)

        result = self.service.update_address(self.user, address.id, {"city": "Ankara"})

        assert result.ok
        assert Address.objects.get(id=address.id).city == "Ankara"

    def test_foreign_address_is_not_owned(self):
        address = AddressFactory()

        assert self.service.update_address(self.user, address.id, {"city": "X"}).error == (
            ErrorCodes.NOT_ADDRESS_OWNER
        )
        assert self.service.delete_address(self.user, address.id).error == ErrorCodes.NOT_ADDRESS_OWNER
        assert Address.objects.filter(id=address.id).exists()

    def test_unknown_address(self):
        assert self.service.get_owned_address(self.user, 999999).error == ErrorCodes.ADDRESS_NOT_FOUND

    def test_set_default(self):
        first = AddressFactory(user=self.user, is_default=True)
        second = AddressFactory(user=self.user)

        result = self.service.set_default(self.user, second.id)

        assert result.value.is_default is True
        assert Address.objects.get(id=first.id).is_default is False

    def test_format_address_skips_blank_parts(self):
        address = AddressFactory(
            full_name="Ayşe Yılmaz", address_line1="Moda Cad. 1", address_line2="", district="Kadıköy"
        )

        formatted = self.service.format_address(address)

        assert formatted.startswith("Ayşe Yılmaz, Moda Cad. 1, Kadıköy")
        assert ", ," not in formatted
