from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer
from marketplace.promotions.api.serializers.coupon_serializers import (
    ClaimCouponRequestSerializer,
    CouponPreviewSerializer,
    PreviewCouponRequestSerializer,
    UserCouponSerializer,
)
from marketplace.services import CouponService
from utils.api import error_response


class CouponViewSet(viewsets.ViewSet):
    """The buyer's coupons. Administration lives in the back-office."""

    permission_classes = [IsAuthenticated]

    def get_service(self) -> CouponService:
        return container.coupon_service()

    @extend_schema(
        operation_id="coupons_list",
        summary="List my coupons",
        responses={200: OpenApiResponse(response=UserCouponSerializer(many=True), description="Claimed coupons")},
        tags=["Marketplace - Coupons"],
    )
    def list(self, request):
        result = self.get_service().list_user_coupons(request.user)
        if not result.ok:
            return error_response(result)

        return Response(UserCouponSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="coupons_claim",
        summary="Add a coupon to my account",
        description="""
        **What it receives:**
        - `code`: coupon code, case-insensitive

        **What it returns:**
        - The claimed coupon. Inactive or expired codes are rejected, and a
          coupon can only be claimed once.
        """,
        request=ClaimCouponRequestSerializer,
        responses={
            201: OpenApiResponse(response=UserCouponSerializer, description="Coupon claimed"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid or inactive coupon code"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Coupon already claimed"),
        },
        tags=["Marketplace - Coupons"],
    )
    @action(detail=False, methods=["post"])
    def claim(self, request):
        input_serializer = ClaimCouponRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().claim_coupon(request.user, input_serializer.validated_data["code"])
        if not result.ok:
            return error_response(result)

        return Response(UserCouponSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="coupons_preview",
        summary="Check a coupon against the items about to be ordered",
        description="""
        **What it receives:**
        - `code`: coupon code
        - `items`: list of `product_id` and `quantity`

        **What it returns:**
        - Subtotal at current prices, the discount the coupon gives and the
          resulting total. Nothing is reserved; the coupon is used only when
          an order is placed with its `coupon_code`.
        """,
        request=PreviewCouponRequestSerializer,
        responses={
            200: OpenApiResponse(response=CouponPreviewSerializer, description="Discount computed"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer, description="Invalid, expired, used up or not applicable coupon"
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Coupons"],
    )
    @action(detail=False, methods=["post"])
    def preview(self, request):
        input_serializer = PreviewCouponRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = input_serializer.validated_data
        result = self.get_service().preview_discount(request.user, data["code"], data["items"])
        if not result.ok:
            return error_response(result)

        return Response(CouponPreviewSerializer(result.value).data)
