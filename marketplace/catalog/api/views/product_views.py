import logging

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CreateReviewRequestSerializer,
    ErrorResponseSerializer,
    PaginatedResponseSerializer,
    TextRequestSerializer,
)
from marketplace.catalog.api.serializers.image_serializers import (
    ProductImageSerializer,
    ProductImageUploadSerializer,
)
from marketplace.catalog.api.serializers.product_serializers import (
    ProductDetailSerializer,
    ProductListSerializer,
    ProductWriteSerializer,
)
from marketplace.catalog.api.serializers.review_serializers import (
    ProductQuestionSerializer,
    ProductReviewSerializer,
)
from marketplace.permissions import IsSellerUser
from marketplace.services import CatalogService
from utils.api import error_response, query_int


logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ViewSet):
    """
    ViewSet for products with full CRUD operations using Service Layer.

    Products are addressed by slug. Moderation (approve, reject, feature)
    lives in the back-office API.
    """

    permission_classes = [IsAuthenticatedOrReadOnly]
    lookup_field = "slug"
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), IsSellerUser()]
        return super().get_permissions()

    def _resolve(self, request, slug):
        """Load the product behind ``slug`` as the caller may see it."""
        return self.get_service().get_product_by_slug(slug, request.user)

    @extend_schema(
        operation_id="products_list",
        summary="List products",
        description="""
        **What it receives:**
        - Filters: `category` (slug), `store` (slug), `price_min`, `price_max`, `brand`,
          `in_stock`, `is_featured`, `search`
        - `ordering`: `created_at`, `price`, `name`, `stock` (prefix with `-` to reverse)
        - `mine=true` (sellers): every product of the caller's stores, optionally by `status`
        - `status` (admins): `new`, `pending`, `approved`, `rejected`
        - Pagination parameters (page, page_size)

        **What it returns:**
        - Paginated product cards. Anonymous users and buyers only see approved, active products.
        """,
        parameters=[
            OpenApiParameter(name="category", type=str, description="Category slug"),
            OpenApiParameter(name="store", type=str, description="Store slug"),
            OpenApiParameter(name="price_min", type=float, description="Minimum effective price"),
            OpenApiParameter(name="price_max", type=float, description="Maximum effective price"),
            OpenApiParameter(name="in_stock", type=bool, description="Only products with stock"),
            OpenApiParameter(name="is_featured", type=bool, description="Only featured products"),
            OpenApiParameter(name="search", type=str, description="Search name, description and brand"),
            OpenApiParameter(name="ordering", type=str, description="Sort field"),
            OpenApiParameter(name="mine", type=bool, description="Only the caller's own products"),
            OpenApiParameter(name="status", type=str, description="Approval status filter"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
        ],
        responses={
            200: OpenApiResponse(response=PaginatedResponseSerializer, description="Products retrieved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filter"),
        },
        tags=["Marketplace - Products"],
    )
    def list(self, request):
        result = self.get_service().list_products(
            request.user,
            request.query_params,
            query_int(request, "page", 1),
            query_int(request, "page_size", 20, maximum=100),
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = ProductListSerializer(result.value["results"], many=True).data
        return Response(response_data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product details",
        description="""
        **What it receives:**
        - `slug` (in URL)

        **What it returns:**
        - Product with images, store and category. Products awaiting moderation or
          rejected are only returned to the store owner and admins.
        """,
        responses={
            200: OpenApiResponse(response=ProductDetailSerializer, description="Product retrieved"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    def retrieve(self, request, slug=None):
        result = self._resolve(request, slug)
        if not result.ok:
            return error_response(result)

        return Response(ProductDetailSerializer(result.value).data)

    @extend_schema(
        operation_id="products_create",
        summary="Create a product",
        description="""
        **What it receives:**
        - `store_id` of a store the caller owns
        - name, description, brand, price, discount_price, stock_quantity, category_id

        **What it returns:**
        - The created product in `pending` approval status. Admins are notified.
        """,
        request=ProductWriteSerializer,
        responses={
            201: OpenApiResponse(response=ProductDetailSerializer, description="Product submitted for approval"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store or category not found"),
        },
        tags=["Marketplace - Products"],
    )
    def create(self, request):
        input_serializer = ProductWriteSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().create_product(request.user, input_serializer.validated_data)
        if not result.ok:
            return error_response(result)

        return Response(ProductDetailSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="products_update",
        summary="Update a product",
        description="""
        **What it receives:**
        - Any of name, description, brand, price, discount_price, stock_quantity, category_id

        **What it returns:**
        - The updated product. Editing a rejected product sends it back to moderation.
        """,
        request=ProductWriteSerializer,
        responses={
            200: OpenApiResponse(response=ProductDetailSerializer, description="Product updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    def update(self, request, slug=None):
        input_serializer = ProductWriteSerializer(data=request.data, partial=True)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        found = self._resolve(request, slug)
        if not found.ok:
            return error_response(found)

        result = self.get_service().update_product(found.value.id, request.user, input_serializer.validated_data)
        if not result.ok:
            return error_response(result)

        return Response(ProductDetailSerializer(result.value).data)

    def partial_update(self, request, slug=None):
        return self.update(request, slug)

    @extend_schema(
        operation_id="products_destroy",
        summary="Delete a product",
        description="""
        Products that already appear in orders are deactivated instead of deleted,
        so order history keeps pointing at them.
        """,
        responses={
            200: OpenApiResponse(description="Product has orders and was deactivated"),
            204: OpenApiResponse(description="Product deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    def destroy(self, request, slug=None):
        found = self._resolve(request, slug)
        if not found.ok:
            return error_response(found)

        result = self.get_service().delete_product(found.value.id, request.user)
        if not result.ok:
            return error_response(result)

        if result.value["deactivated"]:
            return Response(
                {"detail": "Product has orders and was deactivated instead of deleted", **result.value},
                status=status.HTTP_200_OK,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="products_upload_image",
        summary="Upload a product image",
        description="""
        **What it receives:**
        - Multipart `image` file, optional `alt_text` and `is_primary`

        **What it returns:**
        - The stored image with a signed URL. The first image becomes primary.
        """,
        request=ProductImageUploadSerializer,
        responses={
            201: OpenApiResponse(response=ProductImageSerializer, description="Image uploaded"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=True, methods=["post"], url_path="images")
    def upload_image(self, request, slug=None):
        input_serializer = ProductImageUploadSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        found = self._resolve(request, slug)
        if not found.ok:
            return error_response(found)

        data = input_serializer.validated_data
        result = self.get_service().upload_image(
            found.value.id,
            request.user,
            data["image"],
            alt_text=data.get("alt_text", ""),
            is_primary=data.get("is_primary", False),
        )
        if not result.ok:
            return error_response(result)

        return Response(ProductImageSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="products_reviews",
        summary="List or write reviews of a product",
        description="""
        **GET:** paginated reviews, newest first, with `average_rating`.

        **POST:** rating (1-5), title and comment. One review per user and product.
        """,
        request=CreateReviewRequestSerializer,
        responses={
            200: OpenApiResponse(response=PaginatedResponseSerializer, description="Reviews retrieved"),
            201: OpenApiResponse(response=ProductReviewSerializer, description="Review created"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Already reviewed"),
        },
        tags=["Marketplace - Reviews"],
    )
    @action(detail=True, methods=["get", "post"])
    def reviews(self, request, slug=None):
        found = self._resolve(request, slug)
        if not found.ok:
            return error_response(found)

        service = container.review_service()

        if request.method == "POST":
            result = service.create_review(request.user, found.value.id, request.data)
            if not result.ok:
                return error_response(result)
            return Response(ProductReviewSerializer(result.value).data, status=status.HTTP_201_CREATED)

        result = service.list_reviews(
            found.value.id, query_int(request, "page", 1), query_int(request, "page_size", 20, maximum=100)
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = ProductReviewSerializer(result.value["results"], many=True).data
        return Response(response_data)

    @extend_schema(
        operation_id="products_questions",
        summary="List or ask questions about a product",
        description="""
        **GET:** approved questions, newest first, with approved answers.

        **POST:** `text` of at least 5 characters. New questions wait for moderation.
        """,
        request=TextRequestSerializer,
        responses={
            200: OpenApiResponse(response=ProductQuestionSerializer(many=True), description="Questions retrieved"),
            201: OpenApiResponse(response=ProductQuestionSerializer, description="Question submitted"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Questions"],
    )
    @action(detail=True, methods=["get", "post"])
    def questions(self, request, slug=None):
        found = self._resolve(request, slug)
        if not found.ok:
            return error_response(found)

        service = container.question_service()

        if request.method == "POST":
            result = service.ask_question(request.user, found.value.id, request.data.get("text"))
            if not result.ok:
                return error_response(result)
            return Response(ProductQuestionSerializer(result.value).data, status=status.HTTP_201_CREATED)

        result = service.list_questions(found.value.id)
        if not result.ok:
            return error_response(result)

        return Response(ProductQuestionSerializer(result.value, many=True).data)
