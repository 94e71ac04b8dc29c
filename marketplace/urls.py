from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import prometheus_metrics
from .cart.api.views.cart_views import CartViewSet
from .catalog.api.views.category_views import CategoryViewSet, StoreViewSet
from .catalog.api.views.product_views import ProductViewSet
from .catalog.api.views.review_views import QuestionViewSet, ReviewViewSet
from .ordering.api.views.order_views import OrderViewSet
from .promotions.api.views.coupon_views import CouponViewSet

# Create the main router
router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"stores", StoreViewSet, basename="store")
router.register(r"products", ProductViewSet, basename="product")
router.register(r"reviews", ReviewViewSet, basename="review")
router.register(r"questions", QuestionViewSet, basename="question")
router.register(r"cart", CartViewSet, basename="cart")
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"coupons", CouponViewSet, basename="coupon")

app_name = "marketplace"

urlpatterns = [
    # Prometheus metrics endpoint
    path("metrics/", prometheus_metrics.marketplace_prometheus_metrics, name="marketplace-metrics"),
    path("", include(router.urls)),
]
