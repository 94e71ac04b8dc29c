from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken


def add_role_claims(token, user):
    token["role"] = user.role
    token["is_seller"] = user.role == "seller"
    token["is_admin"] = user.role == "admin" or user.is_superuser
    token["full_name"] = user.full_name
    return token


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Custom JWT serializer that includes user role in token"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        return add_role_claims(token, user)


class CustomRefreshToken(RefreshToken):
    """Custom refresh token that includes user role"""

    @classmethod
    def for_user(cls, user):
        """Create refresh token with custom claims"""
        token = super().for_user(user)
        return add_role_claims(token, user)
