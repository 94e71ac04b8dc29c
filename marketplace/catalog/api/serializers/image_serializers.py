from rest_framework import serializers

from marketplace.catalog.domain.models.catalog import ProductImage


class ProductImageSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = ProductImage
        fields = ["id", "url", "alt_text", "is_primary", "order", "original_filename", "content_type", "created_at"]
        read_only_fields = fields

    def get_url(self, obj):
        return obj.get_url()


class ProductImageUploadSerializer(serializers.Serializer):
    image = serializers.ImageField()
    alt_text = serializers.CharField(max_length=200, required=False, allow_blank=True)
    is_primary = serializers.BooleanField(required=False, default=False)
