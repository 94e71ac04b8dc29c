import django_filters
from django.db.models import Q
from django.db.models.functions import Coalesce

from .models import Product


def with_effective_price(queryset):
    """Annotate ``effective_price_value`` (discount_price when set, else price)."""
    return queryset.annotate(effective_price_value=Coalesce("discount_price", "price"))


class ProductFilter(django_filters.FilterSet):
    """
    Filter for storefront and back-office product listings.

    The queryset must be annotated with ``with_effective_price`` so the price
    range filters and ordering work on the price the buyer pays.
    """

    # Price range filters
    price_min = django_filters.NumberFilter(field_name="effective_price_value", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="effective_price_value", lookup_expr="lte")

    # Category / store filters
    category = django_filters.CharFilter(field_name="category__slug", lookup_expr="exact")
    store = django_filters.CharFilter(field_name="store__slug", lookup_expr="exact")

    brand = django_filters.CharFilter(lookup_expr="icontains")

    # Boolean filters
    is_featured = django_filters.BooleanFilter()
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")

    # Search in multiple fields
    search = django_filters.CharFilter(method="filter_search")

    # Sorting options
    ordering = django_filters.OrderingFilter(
        fields=(
            ("created_at", "created_at"),
            ("effective_price_value", "price"),
            ("name", "name"),
            ("stock_quantity", "stock"),
        ),
        field_labels={
            "created_at": "Date Created",
            "effective_price_value": "Price",
            "name": "Name",
            "stock_quantity": "Stock",
        },
    )

    class Meta:
        model = Product
        fields = ["category", "store", "brand", "is_featured"]

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(stock_quantity__gt=0)
        if value is False:
            return queryset.filter(stock_quantity=0)
        return queryset

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(description__icontains=value) | Q(brand__icontains=value))
