from rest_framework import serializers

from authentication.domain.models import Address


class AddressSerializer(serializers.ModelSerializer):
    single_line = serializers.CharField(source="as_single_line", read_only=True)

    class Meta:
        model = Address
        fields = (
            "id",
            "title",
            "full_name",
            "phone",
            "address_line1",
            "address_line2",
            "district",
            "city",
            "postal_code",
            "country",
            "address_type",
            "is_default",
            "single_line",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "single_line", "created_at", "updated_at")
