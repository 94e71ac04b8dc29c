from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from authentication.models import SellerApplication
from authentication.tests.factories import SellerApplicationFactory, UserFactory

User = get_user_model()


class AuthViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = UserFactory(email="ayse@example.com", full_name="Ayşe Yılmaz")

    def test_login_returns_tokens(self):
        response = self.client.post(
            reverse("login"), {"email": "ayse@example.com", "password": "defaultpassword"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIn("refresh", response.data)
        self.assertEqual(response.data["user"]["email"], "ayse@example.com")

    def test_login_bad_credentials(self):
        response = self.client.post(reverse("login"), {"email": "ayse@example.com", "password": "nope"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_access_token_authenticates(self):
        login = self.client.post(
            reverse("login"), {"email": "ayse@example.com", "password": "defaultpassword"}, format="json"
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        response = self.client.get(reverse("me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "ayse@example.com")

    def test_register(self):
        response = self.client.post(
            reverse("register"),
            {"email": "New@Example.com", "username": "newbie", "password": "Str0ng-Passw0rd!", "full_name": "New"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn("access", response.data)
        self.assertEqual(User.objects.get(email="new@example.com").role, "user")

    def test_register_duplicate_email(self):
        response = self.client.post(
            reverse("register"),
            {"email": "ayse@example.com", "username": "ayse2", "password": "Str0ng-Passw0rd!"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.data)

    def test_register_when_closed(self):
        from backoffice.models import PlatformSettings

        PlatformSettings.objects.create(allow_registrations=False)

        response = self.client.post(
            reverse("register"),
            {"email": "late@example.com", "username": "late", "password": "Str0ng-Passw0rd!"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "registration_closed")

    def test_update_profile(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.patch(reverse("me"), {"full_name": "Ayşe Kaya"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, "Ayşe Kaya")


class SellerApplicationViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)

    def test_status_without_application(self):
        response = self.client.get(reverse("seller_status"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "none")

    def test_apply(self):
        response = self.client.post(
            reverse("seller_apply"),
            {"store_name": "Ege Seramik", "contact_email": "hello@egeseramik.example", "city": "İzmir"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertTrue(SellerApplication.objects.filter(user=self.user, status="pending").exists())

        response = self.client.get(reverse("seller_status"))
        self.assertEqual(response.data["status"], "pending")

    def test_apply_twice_conflicts(self):
        SellerApplicationFactory(user=self.user)

        response = self.client.post(
            reverse("seller_apply"),
            {"store_name": "Ege Seramik", "contact_email": "hello@egeseramik.example"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "application_exists")

    def test_apply_requires_contact_email(self):
        response = self.client.post(reverse("seller_apply"), {"store_name": "Ege Seramik"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
