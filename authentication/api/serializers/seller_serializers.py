from rest_framework import serializers

from authentication.domain.models import SellerApplication

from .auth_serializers import UserSerializer


class SellerApplicationSerializer(serializers.ModelSerializer):
    """Seller application as the applicant submits and sees it"""

    class Meta:
        model = SellerApplication
        fields = (
            "id",
            "store_name",
            "store_description",
            "slug",
            "contact_email",
            "contact_phone",
            "address",
            "city",
            "country",
            "tax_id",
            "website",
            "owner_name",
            "business_address",
            "status",
            "rejection_reason",
            "submitted_at",
            "reviewed_at",
        )
        read_only_fields = ("id", "slug", "status", "rejection_reason", "submitted_at", "reviewed_at")


class SellerApplicationAdminSerializer(SellerApplicationSerializer):
    user = UserSerializer(read_only=True)
    reviewed_by = UserSerializer(read_only=True)

    class Meta(SellerApplicationSerializer.Meta):
        fields = SellerApplicationSerializer.Meta.fields + ("user", "reviewed_by", "updated_at")
        read_only_fields = fields


class RejectApplicationSerializer(serializers.Serializer):
    reason = serializers.CharField(help_text="Shown to the applicant")
