from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import AdminFactory, SellerApplicationFactory, UserFactory
from backoffice.models import Announcement, PlatformSettings
from backoffice.tests.factories import AnnouncementFactory
from infrastructure.container import container
from marketplace.models import Coupon, Order, Product, Store
from marketplace.tests.factories import (
    CategoryFactory,
    CouponFactory,
    OrderFactory,
    OrderItemFactory,
    PendingProductFactory,
    ProductFactory,
    StoreFactory,
)
from notifications.models import Notification


class BackofficeAccessTest(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_anonymous_rejected(self):
        response = self.client.get(reverse("backoffice:dashboard"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_non_admin_forbidden(self):
        store = StoreFactory()
        product = PendingProductFactory(store=store)

        for user in (UserFactory(), store.owner):
            self.client.force_authenticate(user=user)
            self.assertEqual(self.client.get(reverse("backoffice:dashboard")).status_code, status.HTTP_403_FORBIDDEN)
            response = self.client.post(reverse("backoffice:product-approve", kwargs={"product_id": product.id}))
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        product.refresh_from_db()
        self.assertEqual(product.approval_status, "pending")

    def test_role_claim_is_not_trusted(self):
        # Role is read from the database, a demoted admin loses access at once
        admin = AdminFactory()
        self.client.force_authenticate(user=admin)
        type(admin).objects.filter(id=admin.id).update(role="user", is_staff=False)

        response = self.client.get(reverse("backoffice:dashboard"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class BackofficeViewIntegrationTest(TestCase):
    def setUp(self):
        container.event_bus().clear()
        self.client = APIClient()
        self.admin = AdminFactory()
        self.client.force_authenticate(user=self.admin)
        self.store = StoreFactory()

    # ===== Dashboard & settings =====

    def test_dashboard(self):
        order = OrderFactory(store=self.store, total_amount=Decimal("100.00"))
        OrderItemFactory(order=order)

        response = self.client.get(reverse("backoffice:dashboard"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["orders"]["total"], 1)
        self.assertEqual(Decimal(response.data["gross_revenue"]), Decimal("100.00"))
        self.assertEqual(Decimal(response.data["platform_commission"]), Decimal("10.00"))

    def test_settings_roundtrip(self):
        response = self.client.get(reverse("backoffice:settings"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.patch(
            reverse("backoffice:settings"), {"commission_rate": "0.0800", "featured_product_limit": 5}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(PlatformSettings.load().commission_rate, Decimal("0.0800"))
        self.assertEqual(PlatformSettings.load().featured_product_limit, 5)

    def test_settings_rejects_commission_above_one(self):
        response = self.client.patch(reverse("backoffice:settings"), {"commission_rate": "1.5"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    # ===== Product moderation =====

    def test_moderation_queue(self):
        PendingProductFactory(store=self.store)
        ProductFactory(store=self.store)

        response = self.client.get(reverse("backoffice:product-list"), {"status": "pending"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["approval_status"], "pending")

    def test_approve_product(self):
        product = PendingProductFactory(store=self.store)

        response = self.client.post(reverse("backoffice:product-approve", kwargs={"product_id": product.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.approval_status, "approved")
        self.assertTrue(product.is_active)
        self.assertTrue(Notification.objects.filter(user=self.store.owner, type="product_approved").exists())

    def test_reject_product_requires_reason(self):
        product = PendingProductFactory(store=self.store)
        url = reverse("backoffice:product-reject", kwargs={"product_id": product.id})

        response = self.client.post(url, {"reason": "bad"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"reason": "Photos are blurry"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["reject_reason"], "Photos are blurry")

    def test_bulk_approve(self):
        products = PendingProductFactory.create_batch(2, store=self.store)
        ids = [str(p.id) for p in products] + ["00000000-0000-0000-0000-000000000000"]

        response = self.client.post(reverse("backoffice:product-bulk-approve"), {"product_ids": ids}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["succeeded"], 2)
        self.assertEqual(response.data["failed"], 1)
        self.assertEqual(Product.objects.filter(approval_status="approved").count(), 2)

    def test_feature_product(self):
        product = ProductFactory(store=self.store)

        response = self.client.post(
            reverse("backoffice:product-feature", kwargs={"product_id": product.id}),
            {"is_featured": True},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertTrue(product.is_featured)

    # ===== Seller applications =====

    def test_approve_seller_application(self):
        application = SellerApplicationFactory(store_name="Ege Seramik")

        response = self.client.get(reverse("backoffice:seller-application-list"), {"status": "pending"})
        self.assertEqual(len(response.data), 1)

        response = self.client.post(
            reverse("backoffice:seller-application-approve", kwargs={"application_id": application.id})
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["application"]["status"], "approved")
        self.assertEqual(response.data["store"]["name"], "Ege Seramik")
        application.user.refresh_from_db()
        self.assertEqual(application.user.role, "seller")

    def test_reject_seller_application(self):
        application = SellerApplicationFactory()
        url = reverse("backoffice:seller-application-reject", kwargs={"application_id": application.id})

        self.assertEqual(self.client.post(url, {}, format="json").status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"reason": "Missing tax id"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["rejection_reason"], "Missing tax id")

    # ===== Stores, users, categories =====

    def test_create_store(self):
        owner = UserFactory()

        response = self.client.post(
            reverse("backoffice:store-list"), {"owner_id": str(owner.id), "name": "Bakır Evi"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Store.objects.filter(owner=owner).exists())

    def test_deactivate_store(self):
        response = self.client.patch(
            reverse("backoffice:store-detail", kwargs={"store_id": self.store.id}), {"is_active": False}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.store.refresh_from_db()
        self.assertFalse(self.store.is_active)

    def test_change_user_role(self):
        user = UserFactory()

        response = self.client.post(
            reverse("backoffice:user-role", kwargs={"user_id": user.id}), {"role": "admin"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["role"], "admin")

    def test_list_users(self):
        response = self.client.get(reverse("backoffice:user-list"), {"role": "seller"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_category_lifecycle(self):
        response = self.client.post(reverse("backoffice:category-create"), {"name": "Textiles"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        url = reverse("backoffice:category-detail", kwargs={"category_id": response.data["id"]})

        response = self.client.patch(url, {"description": "Rugs and kilims"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_404_NOT_FOUND)

    def test_duplicate_category(self):
        CategoryFactory(name="Textiles")

        response = self.client.post(reverse("backoffice:category-create"), {"name": "Textiles"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    # ===== Orders =====

    def test_list_and_cancel_order(self):
        product = ProductFactory(store=self.store, stock_quantity=3)
        order = OrderFactory(store=self.store)
        OrderItemFactory(order=order, product=product, quantity=2)

        response = self.client.get(reverse("backoffice:order-list"))
        self.assertEqual(response.data["count"], 1)

        response = self.client.patch(
            reverse("backoffice:order-detail", kwargs={"order_id": order.id}), {"status": "cancelled"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 5)

    def test_delete_order(self):
        order = OrderFactory(store=self.store)

        response = self.client.delete(reverse("backoffice:order-detail", kwargs={"order_id": order.id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(id=order.id).exists())


class CouponAdminViewTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = AdminFactory()
        self.client.force_authenticate(user=self.admin)

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.post(
            reverse("backoffice:coupon-list"), {"code": "X", "discount_value": "5"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Coupon.objects.exists())

    def test_create_list_update_delete(self):
        response = self.client.post(
            reverse("backoffice:coupon-list"),
            {"code": "autumn", "discount_type": "fixed_amount", "discount_value": "25.00", "max_uses": 100},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["code"], "AUTUMN")
        coupon_url = reverse("backoffice:coupon-detail", kwargs={"coupon_id": response.data["id"]})

        listed = self.client.get(reverse("backoffice:coupon-list"), {"search": "autu"})
        self.assertEqual(listed.data["count"], 1)

        response = self.client.patch(coupon_url, {"is_active": False}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data["is_active"])

        response = self.client.delete(coupon_url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Coupon.objects.exists())

    def test_duplicate_code_conflicts(self):
        CouponFactory(code="AUTUMN")

        response = self.client.post(
            reverse("backoffice:coupon-list"), {"code": "Autumn", "discount_value": "5"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_discount_type(self):
        response = self.client.post(
            reverse("backoffice:coupon-list"),
            {"code": "ODD", "discount_type": "buy_one_get_one", "discount_value": "5"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("discount_type", response.data)

    def test_missing_coupon(self):
        url = reverse("backoffice:coupon-detail", kwargs={"coupon_id": "11111111-1111-1111-1111-111111111111"})

        self.assertEqual(self.client.get(url).status_code, status.HTTP_404_NOT_FOUND)


class AnnouncementViewTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = AdminFactory()

    def test_public_list_shows_only_current(self):
        AnnouncementFactory(title="Free shipping this week")
        AnnouncementFactory(title="Hidden", is_active=False)
        AnnouncementFactory(title="Later", start_date=timezone.now() + timedelta(days=2))

        response = self.client.get(reverse("announcements"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([a["title"] for a in response.data], ["Free shipping this week"])

    def test_admin_crud_and_toggle(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse("backoffice:announcement-list"),
            {"title": "Maintenance", "content": "Sunday 02:00", "type": "warning", "position": "bottom"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        announcement_id = response.data["id"]
        self.assertEqual(Announcement.objects.get(id=announcement_id).created_by, self.admin)

        response = self.client.patch(
            reverse("backoffice:announcement-detail", kwargs={"announcement_id": announcement_id}),
            {"content": "Sunday 03:00"},
            format="json",
        )
        self.assertEqual(response.data["content"], "Sunday 03:00")

        response = self.client.post(
            reverse("backoffice:announcement-toggle", kwargs={"announcement_id": announcement_id})
        )
        self.assertFalse(response.data["is_active"])

        response = self.client.delete(
            reverse("backoffice:announcement-detail", kwargs={"announcement_id": announcement_id})
        )
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

    def test_bad_colour_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            reverse("backoffice:announcement-list"),
            {"title": "Loud", "content": "x", "text_color": "white"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_list_requires_admin(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.get(reverse("backoffice:announcement-list"))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
