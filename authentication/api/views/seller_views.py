from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.api.serializers import SellerApplicationSerializer
from authentication.api.serializers.response_serializers import (
    ErrorResponseSerializer,
    SellerApplicationStatusResponseSerializer,
)
from infrastructure.container import container
from utils.api import error_response


def get_seller_service():
    return container.seller_service()


class SellerApplicationCreateView(APIView):
    """POST only - Submit seller application"""

    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["post"]

    @extend_schema(
        operation_id="seller_application_submit",
        summary="Submit seller application",
        description="""
        Submit or resubmit application to become a seller.

        **Requirements:**
        - User must be authenticated
        - User cannot already be a seller or own a store
        - Cannot have existing pending application
        - Seller applications must be open in the platform settings

        A previously rejected application is resubmitted in place. Admins are notified.
        """,
        request=SellerApplicationSerializer,
        responses={
            201: OpenApiResponse(
                response=SellerApplicationSerializer,
                description="Application submitted successfully",
                examples=[
                    OpenApiExample(
                        "Successful Submission",
                        value={
                            "id": 42,
                            "store_name": "Anadolu Seramik",
                            "slug": "anadolu-seramik",
                            "contact_email": "info@anadoluseramik.com",
                            "status": "pending",
                        },
                    )
                ],
            ),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Seller applications are closed"),
            409: OpenApiResponse(
                response=ErrorResponseSerializer, description="Already a seller or an application is pending"
            ),
        },
        tags=["Seller Applications"],
    )
    def post(self, request):
        serializer = SellerApplicationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = get_seller_service().submit_application(request.user, serializer.validated_data)
        if not result.ok:
            return error_response(result)

        return Response(SellerApplicationSerializer(result.value).data, status=status.HTTP_201_CREATED)


class SellerApplicationStatusView(APIView):
    """GET only - Latest application of the caller"""

    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get"]

    @extend_schema(
        operation_id="seller_application_status",
        summary="Seller application status",
        description="Status of the caller's latest application, or `none` when they never applied.",
        responses={200: SellerApplicationStatusResponseSerializer},
        tags=["Seller Applications"],
    )
    def get(self, request):
        result = get_seller_service().get_application_status(request.user)
        if not result.ok:
            return error_response(result)

        application = result.value
        if application is None:
            return Response({"status": "none", "application": None})

        return Response({"status": application.status, "application": SellerApplicationSerializer(application).data})
