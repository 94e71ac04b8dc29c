from django.urls import path

from backoffice import views


app_name = "backoffice"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),
    path("settings/", views.platform_settings, name="settings"),
    # Product moderation
    path("products/", views.list_products, name="product-list"),
    path("products/bulk-approve/", views.bulk_approve_products, name="product-bulk-approve"),
    path("products/bulk-reject/", views.bulk_reject_products, name="product-bulk-reject"),
    path("products/<uuid:product_id>/approve/", views.approve_product, name="product-approve"),
    path("products/<uuid:product_id>/reject/", views.reject_product, name="product-reject"),
    path("products/<uuid:product_id>/feature/", views.feature_product, name="product-feature"),
    # Seller applications
    path("seller-applications/", views.list_seller_applications, name="seller-application-list"),
    path(
        "seller-applications/<int:application_id>/approve/",
        views.approve_seller_application,
        name="seller-application-approve",
    ),
    path(
        "seller-applications/<int:application_id>/reject/",
        views.reject_seller_application,
        name="seller-application-reject",
    ),
    # Stores, users, categories
    path("stores/", views.stores, name="store-list"),
    path("stores/<uuid:store_id>/", views.update_store, name="store-detail"),
    path("users/", views.list_users, name="user-list"),
    path("users/<uuid:user_id>/role/", views.change_user_role, name="user-role"),
    path("categories/", views.create_category, name="category-create"),
    path("categories/<int:category_id>/", views.category_detail, name="category-detail"),
    # Orders
    path("orders/", views.list_orders, name="order-list"),
    path("orders/<uuid:order_id>/", views.order_detail, name="order-detail"),
    # Coupons and announcements
    path("coupons/", views.coupons, name="coupon-list"),
    path("coupons/<uuid:coupon_id>/", views.coupon_detail, name="coupon-detail"),
    path("announcements/", views.announcements, name="announcement-list"),
    path("announcements/<int:announcement_id>/", views.announcement_detail, name="announcement-detail"),
    path(
        "announcements/<int:announcement_id>/toggle/",
        views.toggle_announcement,
        name="announcement-toggle",
    ),
]
