# Generated manually for notifications app

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("new_product", "New product awaiting approval"),
                            ("product_approved", "Product approved"),
                            ("product_rejected", "Product rejected"),
                            ("new_order", "New order"),
                            ("order_status_changed", "Order status changed"),
                            ("new_seller_application", "New seller application"),
                            ("seller_application_approved", "Seller application approved"),
                            ("seller_application_rejected", "Seller application rejected"),
                            ("question_answered", "Question answered"),
                            ("system", "System"),
                        ],
                        default="system",
                        max_length=40,
                    ),
                ),
                ("related_id", models.CharField(blank=True, max_length=64)),
                ("related_type", models.CharField(blank=True, max_length=40)),
                ("action_url", models.CharField(blank=True, max_length=500)),
                ("is_read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "is_read", "-created_at"], name="notif_user_read_created_idx")
                ],
            },
        ),
    ]
