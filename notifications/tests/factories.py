import factory

from authentication.tests.factories import UserFactory
from notifications.models import Notification


class NotificationFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Notification

    user = factory.SubFactory(UserFactory)
    type = "system"
    title = factory.Faker("sentence", nb_words=4)
    message = factory.Faker("sentence", nb_words=12)
    is_read = False
