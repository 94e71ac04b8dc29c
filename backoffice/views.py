"""
Back-office views - Admin-only endpoints for the marketplace panel

This file contains every admin panel endpoint:
- Dashboard statistics and platform settings
- Product moderation queue (approve, reject, bulk actions, featuring)
- Seller application review
- Store, user and category administration
- Order oversight

Security: every endpoint checks the admin role against the database through
IsAdminUser (never trust token claims).
"""

import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from authentication.api.serializers import (
    RejectApplicationSerializer,
    SellerApplicationAdminSerializer,
    UserSerializer,
)
from backoffice.serializers import (
    AnnouncementSerializer,
    ChangeRoleSerializer,
    DashboardStatsSerializer,
    PlatformSettingsSerializer,
)
from infrastructure.container import container
from marketplace.api.serializers import (
    BulkModerationRequestSerializer,
    BulkModerationResponseSerializer,
    ErrorResponseSerializer,
    FeatureProductRequestSerializer,
    PaginatedResponseSerializer,
    RejectProductRequestSerializer,
    UpdateOrderRequestSerializer,
)
from marketplace.catalog.api.serializers.category_serializers import CategorySerializer, CategoryWriteSerializer
from marketplace.catalog.api.serializers.product_serializers import ModerationQueueSerializer
from marketplace.catalog.api.serializers.store_serializers import (
    AdminStoreCreateSerializer,
    AdminStoreSerializer,
    AdminStoreUpdateSerializer,
)
from marketplace.ordering.api.serializers.order_serializers import OrderListSerializer, OrderSerializer
from marketplace.promotions.api.serializers.coupon_serializers import AdminCouponSerializer, CouponWriteSerializer
from marketplace.permissions import IsAdminUser
from utils.api import error_response, query_int


logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = [IsAuthenticated, IsAdminUser]

FORBIDDEN = OpenApiResponse(response=ErrorResponseSerializer, description="Admin account required")

PAGE_PARAMETERS = [
    OpenApiParameter(name="page", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY),
    OpenApiParameter(
        name="page_size",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description="Items per page (default: 20, max: 100)",
    ),
]


def _query_bool(request, name):
    value = request.query_params.get(name)
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


def _paged(result, serializer_class):
    """Serialize the ``results`` of a paginated service payload."""
    payload = dict(result.value)
    payload["results"] = serializer_class(payload["results"], many=True).data
    return Response(payload)


# ===============================================================================
# DASHBOARD & SETTINGS
# ===============================================================================


@extend_schema(
    operation_id="admin_dashboard",
    summary="Admin: Dashboard statistics",
    description="""
    **What it returns:**
    - User counts (total, sellers, admins) and store counts
    - Product counts by approval status, plus `new` (pending and recently submitted)
    - Order counts by status
    - Pending seller applications
    - Gross revenue and platform commission of orders that were not cancelled or refunded
    """,
    responses={200: DashboardStatsSerializer, 403: FORBIDDEN},
    tags=["Admin - Dashboard"],
)
@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def dashboard(request):
    result = container.backoffice_service().dashboard_stats()
    if not result.ok:
        return error_response(result)

    return Response(DashboardStatsSerializer(result.value).data)


@extend_schema(
    methods=["GET"],
    operation_id="admin_settings_retrieve",
    summary="Admin: Platform settings",
    responses={200: PlatformSettingsSerializer, 403: FORBIDDEN},
    tags=["Admin - Settings"],
)
@extend_schema(
    methods=["PATCH"],
    operation_id="admin_settings_update",
    summary="Admin: Update platform settings",
    description="`commission_rate` is a fraction between 0 and 1 (0.10 keeps 10% of every order line).",
    request=PlatformSettingsSerializer,
    responses={
        200: PlatformSettingsSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        403: FORBIDDEN,
    },
    tags=["Admin - Settings"],
)
@api_view(["GET", "PATCH"])
@permission_classes(ADMIN_PERMISSIONS)
def platform_settings(request):
    service = container.platform_settings_service()

    if request.method == "GET":
        result = service.get_settings()
        if not result.ok:
            return error_response(result)
        return Response(PlatformSettingsSerializer(result.value).data)

    serializer = PlatformSettingsSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.update_settings(serializer.validated_data, admin_user=request.user)
    if not result.ok:
        return error_response(result)

    logger.info(f"Admin {request.user.id} updated platform settings")
    return Response(PlatformSettingsSerializer(result.value).data)


# ===============================================================================
# PRODUCT MODERATION
# ===============================================================================


@extend_schema(
    operation_id="admin_products_list",
    summary="Admin: Product moderation queue",
    description="""
    **What it receives:**
    - `status` (query param): `new`, `pending`, `approved` or `rejected`; all products when omitted
    - The usual catalog filters (`category`, `store`, `search`, `ordering`, ...)

    **What it returns:**
    - Paginated products with their moderation fields
    """,
    parameters=[
        OpenApiParameter(
            name="status",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            enum=["new", "pending", "approved", "rejected"],
        ),
        *PAGE_PARAMETERS,
    ],
    responses={
        200: PaginatedResponseSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown status filter"),
        403: FORBIDDEN,
    },
    tags=["Admin - Products"],
)
@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def list_products(request):
    params = request.query_params.dict()
    params.pop("mine", None)

    result = container.catalog_service().list_products(
        request.user,
        params,
        page=query_int(request, "page", 1),
        page_size=query_int(request, "page_size", 20, maximum=100),
    )
    if not result.ok:
        return error_response(result)

    return _paged(result, ModerationQueueSerializer)


@extend_schema(
    operation_id="admin_products_approve",
    summary="Admin: Approve a product",
    description="Makes the product live and notifies the seller. Approving twice is a no-op.",
    request=None,
    responses={
        200: ModerationQueueSerializer,
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
    },
    tags=["Admin - Products"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def approve_product(request, product_id):
    result = container.approval_service().approve_product(product_id, request.user)
    if not result.ok:
        return error_response(result)

    return Response(ModerationQueueSerializer(result.value).data)


@extend_schema(
    operation_id="admin_products_reject",
    summary="Admin: Reject a product",
    description="Hides the product and notifies the seller with the reason.",
    request=RejectProductRequestSerializer,
    responses={
        200: ModerationQueueSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Reason shorter than 5 characters"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
    },
    tags=["Admin - Products"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def reject_product(request, product_id):
    result = container.approval_service().reject_product(product_id, request.user, request.data.get("reason"))
    if not result.ok:
        return error_response(result)

    return Response(ModerationQueueSerializer(result.value).data)


def _bulk_ids(request):
    serializer = BulkModerationRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return None, Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return serializer.validated_data, None


@extend_schema(
    operation_id="admin_products_bulk_approve",
    summary="Admin: Approve several products",
    description="Each id is handled on its own; one failure never stops the rest.",
    request=BulkModerationRequestSerializer,
    responses={200: BulkModerationResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Products"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def bulk_approve_products(request):
    data, invalid = _bulk_ids(request)
    if invalid is not None:
        return invalid

    result = container.approval_service().bulk_approve(data["product_ids"], request.user)
    if not result.ok:
        return error_response(result)

    return Response(result.value)


@extend_schema(
    operation_id="admin_products_bulk_reject",
    summary="Admin: Reject several products",
    description="The same reason is sent to every seller. Each id is handled on its own.",
    request=BulkModerationRequestSerializer,
    responses={200: BulkModerationResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Products"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def bulk_reject_products(request):
    data, invalid = _bulk_ids(request)
    if invalid is not None:
        return invalid

    result = container.approval_service().bulk_reject(data["product_ids"], request.user, data.get("reason"))
    if not result.ok:
        return error_response(result)

    return Response(result.value)


@extend_schema(
    operation_id="admin_products_feature",
    summary="Admin: Feature or unfeature a product",
    description="Only approved products can be featured, up to the platform's featured product limit.",
    request=FeatureProductRequestSerializer,
    responses={
        200: ModerationQueueSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Not approved or limit reached"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
    },
    tags=["Admin - Products"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def feature_product(request, product_id):
    serializer = FeatureProductRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.approval_service().set_featured(
        product_id, request.user, is_featured=serializer.validated_data["is_featured"]
    )
    if not result.ok:
        return error_response(result)

    return Response(ModerationQueueSerializer(result.value).data)


# ===============================================================================
# SELLER APPLICATIONS
# ===============================================================================


@extend_schema(
    operation_id="admin_seller_applications_list",
    summary="Admin: Seller applications",
    parameters=[
        OpenApiParameter(
            name="status",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            enum=["pending", "approved", "rejected"],
        )
    ],
    responses={200: SellerApplicationAdminSerializer(many=True), 403: FORBIDDEN},
    tags=["Admin - Seller Applications"],
)
@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def list_seller_applications(request):
    result = container.seller_service().list_applications(status=request.query_params.get("status"))
    if not result.ok:
        return error_response(result)

    return Response(SellerApplicationAdminSerializer(result.value, many=True).data)


@extend_schema(
    operation_id="admin_seller_applications_approve",
    summary="Admin: Approve a seller application",
    description="""
    **What it returns:**
    - The approved application
    - The store created from it; the applicant becomes a seller and is notified
    """,
    request=None,
    responses={
        200: OpenApiResponse(description="Application approved and store created"),
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Application is not pending"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Application not found"),
    },
    tags=["Admin - Seller Applications"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def approve_seller_application(request, application_id):
    result = container.seller_service().approve_application(application_id, request.user)
    if not result.ok:
        return error_response(result)

    return Response(
        {
            "application": SellerApplicationAdminSerializer(result.value["application"]).data,
            "store": AdminStoreSerializer(result.value["store"]).data,
        }
    )


@extend_schema(
    operation_id="admin_seller_applications_reject",
    summary="Admin: Reject a seller application",
    request=RejectApplicationSerializer,
    responses={
        200: SellerApplicationAdminSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing reason or not pending"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Application not found"),
    },
    tags=["Admin - Seller Applications"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def reject_seller_application(request, application_id):
    result = container.seller_service().reject_application(application_id, request.user, request.data.get("reason"))
    if not result.ok:
        return error_response(result)

    return Response(SellerApplicationAdminSerializer(result.value).data)


# ===============================================================================
# STORES
# ===============================================================================


@extend_schema(
    methods=["GET"],
    operation_id="admin_stores_list",
    summary="Admin: Stores",
    parameters=[
        OpenApiParameter(
            name="search",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            description="Store name or owner email",
        ),
        *PAGE_PARAMETERS,
    ],
    responses={200: PaginatedResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Stores"],
)
@extend_schema(
    methods=["POST"],
    operation_id="admin_stores_create",
    summary="Admin: Create a store for a user",
    description="The owner is promoted to the seller role.",
    request=AdminStoreCreateSerializer,
    responses={
        201: AdminStoreSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Owner not found"),
    },
    tags=["Admin - Stores"],
)
@api_view(["GET", "POST"])
@permission_classes(ADMIN_PERMISSIONS)
def stores(request):
    service = container.backoffice_service()

    if request.method == "GET":
        result = service.list_stores(
            search=request.query_params.get("search"),
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size", 20, maximum=100),
        )
        if not result.ok:
            return error_response(result)
        return _paged(result, AdminStoreSerializer)

    serializer = AdminStoreCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.create_store(serializer.validated_data, request.user)
    if not result.ok:
        return error_response(result)

    return Response(AdminStoreSerializer(result.value).data, status=status.HTTP_201_CREATED)


@extend_schema(
    operation_id="admin_stores_update",
    summary="Admin: Update a store",
    description="Toggle `is_active`, `is_verified`, `is_featured` or change the store's `commission_rate`.",
    request=AdminStoreUpdateSerializer,
    responses={
        200: AdminStoreSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
    },
    tags=["Admin - Stores"],
)
@api_view(["PATCH"])
@permission_classes(ADMIN_PERMISSIONS)
def update_store(request, store_id):
    serializer = AdminStoreUpdateSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.backoffice_service().update_store(store_id, serializer.validated_data, request.user)
    if not result.ok:
        return error_response(result)

    return Response(AdminStoreSerializer(result.value).data)


# ===============================================================================
# USERS
# ===============================================================================


@extend_schema(
    operation_id="admin_users_list",
    summary="Admin: Users",
    parameters=[
        OpenApiParameter(
            name="role",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            enum=["user", "seller", "admin"],
        ),
        OpenApiParameter(
            name="search",
            type=OpenApiTypes.STR,
            location=OpenApiParameter.QUERY,
            description="Email, username or full name",
        ),
        *PAGE_PARAMETERS,
    ],
    responses={200: PaginatedResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Users"],
)
@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def list_users(request):
    result = container.backoffice_service().list_users(
        role=request.query_params.get("role"),
        search=request.query_params.get("search"),
        page=query_int(request, "page", 1),
        page_size=query_int(request, "page_size", 20, maximum=100),
    )
    if not result.ok:
        return error_response(result)

    return _paged(result, UserSerializer)


@extend_schema(
    operation_id="admin_users_change_role",
    summary="Admin: Change a user's role",
    description="Admins cannot change their own role.",
    request=ChangeRoleSerializer,
    responses={
        200: UserSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Unknown role or own account"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="User not found"),
    },
    tags=["Admin - Users"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def change_user_role(request, user_id):
    serializer = ChangeRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.backoffice_service().change_role(user_id, serializer.validated_data["role"], request.user)
    if not result.ok:
        return error_response(result)

    return Response(UserSerializer(result.value).data)


# ===============================================================================
# CATEGORIES
# ===============================================================================


@extend_schema(
    operation_id="admin_categories_create",
    summary="Admin: Create a category",
    request=CategoryWriteSerializer,
    responses={
        201: CategorySerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing or duplicate name"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Parent category not found"),
    },
    tags=["Admin - Categories"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def create_category(request):
    serializer = CategoryWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = container.backoffice_service().create_category(serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(CategorySerializer(result.value).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=["PATCH"],
    operation_id="admin_categories_update",
    summary="Admin: Update a category",
    request=CategoryWriteSerializer,
    responses={
        200: CategorySerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Duplicate name"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
    },
    tags=["Admin - Categories"],
)
@extend_schema(
    methods=["DELETE"],
    operation_id="admin_categories_destroy",
    summary="Admin: Delete a category",
    responses={
        204: OpenApiResponse(description="Category deleted"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
    },
    tags=["Admin - Categories"],
)
@api_view(["PATCH", "DELETE"])
@permission_classes(ADMIN_PERMISSIONS)
def category_detail(request, category_id):
    service = container.backoffice_service()

    if request.method == "DELETE":
        result = service.delete_category(category_id)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = CategoryWriteSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.update_category(category_id, serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(CategorySerializer(result.value).data)


# ===============================================================================
# ORDERS
# ===============================================================================


@extend_schema(
    operation_id="admin_orders_list",
    summary="Admin: All orders",
    parameters=[
        OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        *PAGE_PARAMETERS,
    ],
    responses={200: PaginatedResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Orders"],
)
@api_view(["GET"])
@permission_classes(ADMIN_PERMISSIONS)
def list_orders(request):
    result = container.order_service().list_orders(
        request.user,
        scope=None,
        status=request.query_params.get("status"),
        page=query_int(request, "page", 1),
        page_size=query_int(request, "page_size", 20, maximum=100),
    )
    if not result.ok:
        return error_response(result)

    return _paged(result, OrderListSerializer)


@extend_schema(
    methods=["PATCH"],
    operation_id="admin_orders_update",
    summary="Admin: Update an order",
    description="Cancelling an order restores the stock of its items.",
    request=UpdateOrderRequestSerializer,
    responses={
        200: OrderSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status transition"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
    },
    tags=["Admin - Orders"],
)
@extend_schema(
    methods=["DELETE"],
    operation_id="admin_orders_destroy",
    summary="Admin: Delete an order",
    responses={
        204: OpenApiResponse(description="Order deleted"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
    },
    tags=["Admin - Orders"],
)
@api_view(["PATCH", "DELETE"])
@permission_classes(ADMIN_PERMISSIONS)
def order_detail(request, order_id):
    service = container.order_service()

    if request.method == "DELETE":
        result = service.delete_order(order_id, request.user)
        if not result.ok:
            return error_response(result)
        logger.info(f"Admin {request.user.id} deleted order {order_id}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = UpdateOrderRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.update_order(order_id, request.user, serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(OrderSerializer(result.value).data)


# ===============================================================================
# COUPONS
# ===============================================================================


@extend_schema(
    methods=["GET"],
    operation_id="admin_coupons_list",
    summary="Admin: All coupons",
    parameters=[
        OpenApiParameter(name="search", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY),
        *PAGE_PARAMETERS,
    ],
    responses={200: PaginatedResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Coupons"],
)
@extend_schema(
    methods=["POST"],
    operation_id="admin_coupons_create",
    summary="Admin: Create a coupon",
    description="""
    The code is stored upper-case and must be unique. Percentage coupons take
    a `discount_value` up to 100. `specific_products` and `specific_categories`
    coupons need `product_ids` or `category_ids`.
    """,
    request=CouponWriteSerializer,
    responses={
        201: AdminCouponSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid discount or targeting"),
        403: FORBIDDEN,
        409: OpenApiResponse(response=ErrorResponseSerializer, description="Coupon code already exists"),
    },
    tags=["Admin - Coupons"],
)
@api_view(["GET", "POST"])
@permission_classes(ADMIN_PERMISSIONS)
def coupons(request):
    service = container.coupon_service()

    if request.method == "GET":
        result = service.list_coupons(
            search=request.query_params.get("search"),
            is_active=_query_bool(request, "is_active"),
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size", 20, maximum=100),
        )
        if not result.ok:
            return error_response(result)
        return _paged(result, AdminCouponSerializer)

    serializer = CouponWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.create_coupon(request.user, serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(AdminCouponSerializer(result.value).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=["GET"],
    operation_id="admin_coupons_retrieve",
    summary="Admin: Coupon details",
    responses={200: AdminCouponSerializer, 403: FORBIDDEN, 404: OpenApiResponse(response=ErrorResponseSerializer)},
    tags=["Admin - Coupons"],
)
@extend_schema(
    methods=["PATCH"],
    operation_id="admin_coupons_update",
    summary="Admin: Update a coupon",
    request=CouponWriteSerializer,
    responses={
        200: AdminCouponSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid discount or targeting"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Coupon not found"),
        409: OpenApiResponse(response=ErrorResponseSerializer, description="Coupon code already exists"),
    },
    tags=["Admin - Coupons"],
)
@extend_schema(
    methods=["DELETE"],
    operation_id="admin_coupons_destroy",
    summary="Admin: Delete a coupon",
    responses={
        204: OpenApiResponse(description="Coupon deleted"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Coupon not found"),
    },
    tags=["Admin - Coupons"],
)
@api_view(["GET", "PATCH", "DELETE"])
@permission_classes(ADMIN_PERMISSIONS)
def coupon_detail(request, coupon_id):
    service = container.coupon_service()

    if request.method == "GET":
        result = service.get_coupon(coupon_id)
    elif request.method == "DELETE":
        result = service.delete_coupon(coupon_id, request.user)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
    else:
        serializer = CouponWriteSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        result = service.update_coupon(coupon_id, request.user, serializer.validated_data)

    if not result.ok:
        return error_response(result)

    return Response(AdminCouponSerializer(result.value).data)


# ===============================================================================
# ANNOUNCEMENTS
# ===============================================================================


@extend_schema(
    operation_id="announcements_active",
    summary="Announcements shown on the site right now",
    description="Active announcements whose start date has passed and whose end date, if any, has not.",
    responses={200: AnnouncementSerializer(many=True)},
    tags=["Announcements"],
)
@api_view(["GET"])
@permission_classes([AllowAny])
def active_announcements(request):
    result = container.announcement_service().list_active()
    if not result.ok:
        return error_response(result)

    return Response(AnnouncementSerializer(result.value, many=True).data)


@extend_schema(
    methods=["GET"],
    operation_id="admin_announcements_list",
    summary="Admin: All announcements",
    parameters=[
        OpenApiParameter(name="is_active", type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY),
        *PAGE_PARAMETERS,
    ],
    responses={200: PaginatedResponseSerializer, 403: FORBIDDEN},
    tags=["Admin - Announcements"],
)
@extend_schema(
    methods=["POST"],
    operation_id="admin_announcements_create",
    summary="Admin: Create an announcement",
    request=AnnouncementSerializer,
    responses={
        201: AnnouncementSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid dates or colours"),
        403: FORBIDDEN,
    },
    tags=["Admin - Announcements"],
)
@api_view(["GET", "POST"])
@permission_classes(ADMIN_PERMISSIONS)
def announcements(request):
    service = container.announcement_service()

    if request.method == "GET":
        result = service.list_announcements(
            is_active=_query_bool(request, "is_active"),
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size", 20, maximum=100),
        )
        if not result.ok:
            return error_response(result)
        return _paged(result, AnnouncementSerializer)

    serializer = AnnouncementSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.create_announcement(request.user, serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(AnnouncementSerializer(result.value).data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=["PATCH"],
    operation_id="admin_announcements_update",
    summary="Admin: Update an announcement",
    request=AnnouncementSerializer,
    responses={
        200: AnnouncementSerializer,
        400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid dates or colours"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Announcement not found"),
    },
    tags=["Admin - Announcements"],
)
@extend_schema(
    methods=["DELETE"],
    operation_id="admin_announcements_destroy",
    summary="Admin: Delete an announcement",
    responses={
        204: OpenApiResponse(description="Announcement deleted"),
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Announcement not found"),
    },
    tags=["Admin - Announcements"],
)
@api_view(["PATCH", "DELETE"])
@permission_classes(ADMIN_PERMISSIONS)
def announcement_detail(request, announcement_id):
    service = container.announcement_service()

    if request.method == "DELETE":
        result = service.delete_announcement(announcement_id)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = AnnouncementSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    result = service.update_announcement(announcement_id, serializer.validated_data)
    if not result.ok:
        return error_response(result)

    return Response(AnnouncementSerializer(result.value).data)


@extend_schema(
    operation_id="admin_announcements_toggle",
    summary="Admin: Switch an announcement on or off",
    request=None,
    responses={
        200: AnnouncementSerializer,
        403: FORBIDDEN,
        404: OpenApiResponse(response=ErrorResponseSerializer, description="Announcement not found"),
    },
    tags=["Admin - Announcements"],
)
@api_view(["POST"])
@permission_classes(ADMIN_PERMISSIONS)
def toggle_announcement(request, announcement_id):
    result = container.announcement_service().toggle_announcement(announcement_id)
    if not result.ok:
        return error_response(result)

    return Response(AnnouncementSerializer(result.value).data)
