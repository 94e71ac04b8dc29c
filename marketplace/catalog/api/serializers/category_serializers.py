from rest_framework import serializers

from marketplace.catalog.domain.models.category import Category


class MinimalCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug"]
        read_only_fields = ["id", "slug"]


class CategorySerializer(serializers.ModelSerializer):
    subcategories = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "parent", "subcategories", "is_active", "created_at"]
        read_only_fields = ["id", "slug", "created_at", "subcategories"]

    def get_subcategories(self, obj):
        children = obj.children.filter(is_active=True)
        return MinimalCategorySerializer(children, many=True).data


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)
