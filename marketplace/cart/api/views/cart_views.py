from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    AddToCartRequestSerializer,
    ErrorResponseSerializer,
    RemoveFromCartRequestSerializer,
    UpdateCartRequestSerializer,
)
from marketplace.cart.api.serializers.cart_serializers import CartServiceOutputSerializer
from marketplace.services import CartService
from utils.api import error_response


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        return container.cart_service()

    def get_output_serializer(self, *args, **kwargs):
        return CartServiceOutputSerializer(*args, **kwargs)

    def _cart_response(self, result):
        if not result.ok:
            return error_response(result)
        return Response(self.get_output_serializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_get",
        summary="Get user's shopping cart",
        description="""
        **What it receives:**
        - Authentication token (header)

        **What it returns:**
        - Cart items with product details, unit price and line total
        - Totals and item count
        """,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Cart retrieved successfully"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    def list(self, request):
        return self._cart_response(self.get_service().get_cart(request.user))

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to add
        - `quantity` (integer, optional): Quantity to add (default: 1)

        **What it returns:**
        - Updated cart with all items and totals
        """,
        request=AddToCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Item added successfully"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer, description="Invalid quantity, inactive product or insufficient stock"
            ),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"])
    def add_item(self, request):
        input_serializer = AddToCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().add_to_cart(
            request.user,
            input_serializer.validated_data["product_id"],
            input_serializer.validated_data.get("quantity", 1),
        )
        return self._cart_response(result)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Update item quantity in cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to update
        - `quantity` (integer): New quantity (at least 1)

        **What it returns:**
        - Updated cart
        """,
        request=UpdateCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Quantity updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Bad quantity or low stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["patch"])
    def update_item(self, request):
        input_serializer = UpdateCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_quantity(
            request.user,
            input_serializer.validated_data["product_id"],
            input_serializer.validated_data["quantity"],
        )
        return self._cart_response(result)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        request=RemoveFromCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartServiceOutputSerializer, description="Item removed"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def remove_item(self, request):
        input_serializer = RemoveFromCartRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().remove_from_cart(request.user, input_serializer.validated_data["product_id"])
        return self._cart_response(result)

    @extend_schema(
        operation_id="cart_clear",
        summary="Remove every item from the cart",
        responses={
            200: OpenApiResponse(description="Number of removed items"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def clear(self, request):
        result = self.get_service().clear_cart(request.user)

        if not result.ok:
            return error_response(result)

        return Response({"removed": result.value}, status=status.HTTP_200_OK)
