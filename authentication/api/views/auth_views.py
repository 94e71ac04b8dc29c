from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.api.serializers import UserRegistrationSerializer, UserSerializer, UserUpdateSerializer
from authentication.api.serializers.response_serializers import (
    ErrorResponseSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
    RegisterResponseSerializer,
)
from authentication.domain.services.auth_service import AuthService
from infrastructure.container import container
from utils.service_base import http_status_for


# Dependency Injection Helper
def get_auth_service():
    """Factory to get AuthService instance with dependencies."""
    return AuthService(event_bus=container.event_bus())


class LoginAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_login",
        summary="Login with email and password",
        description="""
        Authenticate user with email and password.

        The access token carries `role`, `is_seller` and `is_admin` claims so
        clients can route without an extra request.
        """,
        request=LoginRequestSerializer,
        responses={
            200: OpenApiResponse(
                response=LoginResponseSerializer,
                description="Login successful",
                examples=[
                    OpenApiExample(
                        "Successful Login",
                        value={
                            "message": "Login successful",
                            "access": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                            "refresh": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                            "user": {
                                "id": "123e4567-e89b-12d3-a456-426614174000",
                                "email": "user@example.com",
                                "username": "ayse",
                                "role": "user",
                            },
                        },
                    )
                ],
            ),
            401: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid credentials"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        email = request.data.get("email")
        password = request.data.get("password")

        result = get_auth_service().login(email, password)

        if result.success:
            return Response(
                {
                    "message": result.message,
                    "access": result.access_token,
                    "refresh": result.refresh_token,
                    "user": UserSerializer(result.user).data,
                },
                status=status.HTTP_200_OK,
            )

        return Response({"detail": result.error}, status=status.HTTP_401_UNAUTHORIZED)


class RegisterAPIView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(
        operation_id="auth_register",
        summary="Register new user account",
        description="""
        Create a buyer account and return it with a JWT pair.

        **Flow:**
        1. User submits email, username, password and full name
        2. Account created with role `user`
        3. Tokens returned so the client is logged in immediately

        Refused with `registration_closed` when the platform settings switch registrations off.
        """,
        request=UserRegistrationSerializer,
        responses={
            201: OpenApiResponse(response=RegisterResponseSerializer, description="Registration successful"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Validation error (email exists, weak password, etc.)",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Registrations are closed"),
        },
        tags=["Authentication"],
    )
    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = get_auth_service().register(
            email=serializer.validated_data["email"],
            username=serializer.validated_data["username"],
            password=serializer.validated_data["password"],
            full_name=serializer.validated_data.get("full_name", ""),
        )

        if result.success:
            return Response(
                {
                    "message": result.message,
                    "access": result.access_token,
                    "refresh": result.refresh_token,
                    "user": UserSerializer(result.user).data,
                },
                status=status.HTTP_201_CREATED,
            )

        return Response(
            {"detail": result.error, "code": result.error_code}, status=http_status_for(result.error_code)
        )


class MeAPIView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        operation_id="auth_me",
        summary="Current user",
        responses={200: UserSerializer},
        tags=["Authentication"],
    )
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        operation_id="auth_me_update",
        summary="Update own account",
        description="Change username, full name or phone. Role and email cannot be changed here.",
        request=UserUpdateSerializer,
        responses={
            200: UserSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
        },
        tags=["Authentication"],
    )
    def patch(self, request):
        serializer = UserUpdateSerializer(request.user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = serializer.save()
        return Response(UserSerializer(user).data)
