import logging

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import PaginatedResponseSerializer
from marketplace.catalog.api.serializers.category_serializers import CategorySerializer
from marketplace.catalog.api.serializers.product_serializers import ProductListSerializer
from marketplace.catalog.api.serializers.store_serializers import StoreSerializer
from marketplace.services import CatalogService
from utils.api import error_response, query_int


logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(
        summary="List all categories",
        description="Retrieve a list of all active product categories.",
        responses={200: CategorySerializer(many=True)},
        tags=["Marketplace - Categories"],
    ),
    retrieve=extend_schema(
        summary="Get category details",
        description="Retrieve details of a specific category by slug.",
        responses={200: CategorySerializer},
        tags=["Marketplace - Categories"],
    ),
)
class CategoryViewSet(viewsets.ViewSet):
    """
    ViewSet for categories - read-only operations using Service Layer
    """

    permission_classes = [AllowAny]
    lookup_field = "slug"

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def list(self, request):
        result = self.get_service().list_categories(active_only=True)

        if not result.ok:
            return error_response(result)

        return Response(CategorySerializer(result.value, many=True).data)

    def retrieve(self, request, slug=None):
        result = self.get_service().get_category(slug)

        if not result.ok:
            return error_response(result)

        return Response(CategorySerializer(result.value).data)

    @extend_schema(
        summary="Get products from category",
        description="Approved products within the specified category, with the usual listing filters.",
        responses={200: PaginatedResponseSerializer},
        tags=["Marketplace - Categories"],
    )
    @action(detail=True, methods=["get"])
    def products(self, request, slug=None):
        params = request.query_params.copy()
        params["category"] = slug
        params.pop("mine", None)
        params.pop("status", None)

        result = self.get_service().list_products(
            None, params, query_int(request, "page", 1), query_int(request, "page_size", 20, maximum=100)
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = ProductListSerializer(result.value["results"], many=True).data
        return Response(response_data)


@extend_schema_view(
    list=extend_schema(
        summary="List stores",
        description="Active stores, featured first.",
        responses={200: PaginatedResponseSerializer},
        tags=["Marketplace - Stores"],
    ),
    retrieve=extend_schema(
        summary="Get store details",
        responses={200: StoreSerializer},
        tags=["Marketplace - Stores"],
    ),
)
class StoreViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]
    lookup_field = "slug"

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def list(self, request):
        result = self.get_service().list_stores(
            query_int(request, "page", 1), query_int(request, "page_size", 20, maximum=100)
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = StoreSerializer(result.value["results"], many=True).data
        return Response(response_data)

    def retrieve(self, request, slug=None):
        result = self.get_service().get_store_by_slug(slug)

        if not result.ok:
            return error_response(result)

        return Response(StoreSerializer(result.value).data)

    @extend_schema(
        summary="Get products of a store",
        responses={200: PaginatedResponseSerializer},
        tags=["Marketplace - Stores"],
    )
    @action(detail=True, methods=["get"])
    def products(self, request, slug=None):
        params = request.query_params.copy()
        params["store"] = slug
        params.pop("mine", None)
        params.pop("status", None)

        result = self.get_service().list_products(
            None, params, query_int(request, "page", 1), query_int(request, "page_size", 20, maximum=100)
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = ProductListSerializer(result.value["results"], many=True).data
        return Response(response_data)
