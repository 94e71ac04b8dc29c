"""
Response Serializers for API Documentation

These serializers define the structure of API responses for OpenAPI schema generation.
They are NOT used for data validation, only for documentation in Swagger/ReDoc.
"""

from rest_framework import serializers

from .auth_serializers import UserSerializer
from .seller_serializers import SellerApplicationSerializer


# ===== Authentication Response Serializers =====


class LoginResponseSerializer(serializers.Serializer):
    """Response for successful login"""

    message = serializers.CharField(help_text="Success message")
    access = serializers.CharField(help_text="JWT access token (claims include role, is_seller, is_admin)")
    refresh = serializers.CharField(help_text="JWT refresh token")
    user = UserSerializer(help_text="User details")


class LoginRequestSerializer(serializers.Serializer):
    """Request body for login"""

    email = serializers.EmailField(help_text="User's email address")
    password = serializers.CharField(write_only=True, style={"input_type": "password"}, help_text="User's password")


class RegisterResponseSerializer(LoginResponseSerializer):
    """Response for successful registration: the new user and their first token pair"""


# ===== Seller Onboarding Response Serializers =====


class SellerApplicationStatusResponseSerializer(serializers.Serializer):
    """Response for seller application status check"""

    status = serializers.ChoiceField(
        choices=["none", "pending", "approved", "rejected"], help_text="Status of the latest application"
    )
    application = SellerApplicationSerializer(allow_null=True, help_text="Latest application, if any")


class SellerApplicationApproveResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    application_id = serializers.IntegerField()
    store_id = serializers.UUIDField()
    store_slug = serializers.CharField()


# ===== Error Response Serializers =====


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    detail = serializers.CharField(help_text="Error message")
    code = serializers.CharField(required=False, help_text="Error code identifier")


class ValidationErrorResponseSerializer(serializers.Serializer):
    """Validation error response with field-specific errors"""

    field_name = serializers.ListField(
        child=serializers.CharField(), help_text="List of validation errors for this field"
    )
