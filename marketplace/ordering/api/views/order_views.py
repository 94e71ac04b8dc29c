from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CreateOrderRequestSerializer,
    ErrorResponseSerializer,
    PaginatedResponseSerializer,
    UpdateOrderRequestSerializer,
)
from marketplace.ordering.api.serializers.order_serializers import OrderSerializer
from marketplace.services import OrderService
from utils.api import error_response, query_int


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    @extend_schema(
        operation_id="orders_list",
        summary="List orders",
        description="""
        **What it receives:**
        - Authentication token
        - `as` (query param): `buyer` for own purchases, `seller` for orders of own stores.
          Admins see every order when omitted.
        - Optional status filter (query param)
        - Pagination parameters (page, page_size)

        **What it returns:**
        - Paginated list of orders with their items
        """,
        parameters=[
            OpenApiParameter(name="as", type=str, enum=["buyer", "seller"], description="Listing scope"),
            OpenApiParameter(name="status", type=str, description="Filter by order status"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
        ],
        responses={
            200: OpenApiResponse(response=PaginatedResponseSerializer, description="Orders retrieved successfully"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Orders"],
    )
    def list(self, request):
        service = self.get_service()

        scope = request.query_params.get("as")
        status_filter = request.query_params.get("status")
        page = query_int(request, "page", 1)
        page_size = query_int(request, "page_size", 20, maximum=100)

        result = service.list_orders(request.user, scope, status_filter, page, page_size)

        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = OrderSerializer(result.value["results"], many=True).data

        return Response(response_data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        description="""
        **What it receives:**
        - `order_id` (UUID in URL): Order to retrieve
        - Authentication token (buyer, owner of the store or admin)

        **What it returns:**
        - Complete order details including items and seller amounts
        """,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order retrieved successfully"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not allowed to see this order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(pk, request.user)

        if not result.ok:
            return error_response(result)

        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_create",
        summary="Place an order",
        description="""
        **What it receives:**
        - `store_id` (UUID): Store the products belong to
        - `order_items` (list): product_id, quantity and the unit price the buyer saw
        - `total_amount`, `shipping_fee`, `discount_amount` (decimals)
        - `coupon_code` (optional): the discount is computed from the coupon and used once
        - `address_id` (saved address) or `shipping_address_full` (inline text)
        - `order_note`, `payment_method` (optional)
        - `user_id` (admins only): place the order on behalf of this user

        **What it returns:**
        - Created order in `pending` status with its items
        - Stock of every ordered product is decremented
        - The store owner is notified
        """,
        request=CreateOrderRequestSerializer,
        responses={
            201: OpenApiResponse(response=OrderSerializer, description="Order placed successfully"),
            400: OpenApiResponse(
                response=ErrorResponseSerializer,
                description="Empty order, price or total mismatch, inactive product, insufficient stock, no address, "
                "unusable coupon",
            ),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Address of another user"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store, product or address not found"),
            409: OpenApiResponse(
                response=ErrorResponseSerializer, description="An open order already exists for these products"
            ),
        },
        tags=["Marketplace - Orders"],
    )
    def create(self, request):
        input_serializer = CreateOrderRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().place_order(request.user, input_serializer.validated_data)

        if not result.ok:
            return error_response(result)

        return Response(OrderSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="orders_update",
        summary="Update an order",
        description="""
        **What it receives:**
        - `order_id` (UUID in URL)
        - `status`, `payment_status`, `tracking_number`, `shipping_carrier`, `order_note`
          (store owner or admin)
        - Buyers may only send `status=cancelled`, which records a cancellation request

        **What it returns:**
        - Updated order
        """,
        request=UpdateOrderRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status transition"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not allowed to change this order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def update(self, request, pk=None):
        input_serializer = UpdateOrderRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_order(pk, request.user, input_serializer.validated_data)

        if not result.ok:
            return error_response(result)

        return Response(OrderSerializer(result.value).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_partial_update",
        summary="Partially update an order",
        request=UpdateOrderRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderSerializer, description="Order updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status transition"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not allowed to change this order"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    @extend_schema(
        operation_id="orders_destroy",
        summary="Delete an order (admin)",
        responses={
            204: OpenApiResponse(description="Order deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admins only"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
        },
        tags=["Marketplace - Orders"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_order(pk, request.user)

        if not result.ok:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)
