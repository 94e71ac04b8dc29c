"""
AuthService - Core Authentication Business Logic.

Registration and email/password login with JWT issuance. Keeps views thin and
lets registration honour the platform-wide ``allow_registrations`` switch.
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from django.db import IntegrityError, transaction

from authentication.api.serializers.jwt_serializers import CustomRefreshToken
from authentication.domain.events import UserRegisteredEvent
from authentication.infra.observability import record_login_attempt, record_registration_attempt
from infrastructure.events import get_event_bus
from utils.service_base import ErrorCodes

from .results import LoginResult, RegisterResult


User = get_user_model()
logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service encapsulating registration and login.
    """

    def __init__(self, event_bus=None):
        self.event_bus = event_bus or get_event_bus()

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate user with email/password.

        Returns:
            LoginResult with authentication status and tokens
        """
        try:
            if not email or not password:
                return LoginResult(success=False, error="Email and password are required.")

            user = authenticate(username=email, password=password)
            if not user:
                record_login_attempt(success=False)
                return LoginResult(success=False, error="Invalid email or password.")

            record_login_attempt(success=True)
            return self._generate_login_tokens(user)

        except Exception as e:
            logger.exception(f"Login error: {e}")
            return LoginResult(success=False, error="An unexpected error occurred. Please try again later.")

    def _generate_login_tokens(self, user) -> LoginResult:
        """Generate JWT tokens for successful login."""
        try:
            refresh = CustomRefreshToken.for_user(user)
            return LoginResult(
                success=True,
                user=user,
                access_token=str(refresh.access_token),
                refresh_token=str(refresh),
                message="Login successful",
            )
        except Exception as e:
            logger.exception(f"Token generation failed for user {user.id}: {e}")
            return LoginResult(success=False, error="Failed to generate authentication tokens.")

    def register(self, email: str, username: str, password: str, full_name: str = "") -> RegisterResult:
        """
        Register a new buyer account and issue its first token pair.

        Business Logic:
        1. Refuse when the platform has registrations switched off
        2. Create the user with role ``user``
        3. Publish ``user.registered``

        Field validation (password strength, unique email) is handled by the serializer.
        """
        from backoffice.models import PlatformSettings

        platform_settings = PlatformSettings.load()
        if platform_settings is not None and not platform_settings.allow_registrations:
            record_registration_attempt(success=False, reason="registration_closed")
            return RegisterResult(
                success=False,
                error="Registrations are currently closed.",
                error_code=ErrorCodes.REGISTRATION_CLOSED,
            )

        try:
            with transaction.atomic():
                user = User.objects.create_user(
                    username=username,
                    email=email,
                    password=password,
                    full_name=full_name,
                    role="user",
                )
        except IntegrityError as e:
            logger.warning(f"Registration conflict: {e}")
            record_registration_attempt(success=False, reason="duplicate")
            return RegisterResult(
                success=False,
                error="An account with this email or username already exists.",
                error_code=ErrorCodes.VALIDATION_ERROR,
            )
        except Exception as e:
            logger.exception(f"Registration error: {e}")
            record_registration_attempt(success=False, reason="internal_error")
            return RegisterResult(
                success=False, error="Registration failed. Please try again.", error_code=ErrorCodes.INTERNAL_ERROR
            )

        record_registration_attempt(success=True)

        event = UserRegisteredEvent(user_id=str(user.id), email=user.email)
        self.event_bus.publish(event.event_type, event.payload)

        tokens = self._generate_login_tokens(user)
        return RegisterResult(
            success=True,
            user=user,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            message="Registration successful!",
        )
