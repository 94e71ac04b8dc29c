import uuid

import factory
from django.contrib.auth import get_user_model

from authentication.models import Address, SellerApplication

User = get_user_model()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    id = factory.LazyFunction(uuid.uuid4)
    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    full_name = factory.Faker("name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True
    role = "user"


class SellerFactory(UserFactory):
    role = "seller"
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")


class AdminFactory(UserFactory):
    role = "admin"
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class AddressFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Address

    user = factory.SubFactory(UserFactory)
    title = "Home"
    full_name = factory.Faker("name")
    phone = "+90 555 000 0000"
    address_line1 = factory.Faker("street_address")
    district = "Kadıköy"
    city = "İstanbul"
    postal_code = "34710"
    country = "Türkiye"
    address_type = "shipping"
    is_default = False


class SellerApplicationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = SellerApplication

    user = factory.SubFactory(UserFactory)
    store_name = factory.Sequence(lambda n: f"Atölye {n}")
    store_description = factory.Faker("sentence", nb_words=12)
    contact_email = factory.Sequence(lambda n: f"store_{n}@example.com")
    contact_phone = "+90 212 000 0000"
    city = "İzmir"
    country = "Türkiye"
    status = "pending"
