from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.api.serializers import AddressSerializer
from authentication.api.serializers.response_serializers import ErrorResponseSerializer
from infrastructure.container import container
from utils.api import error_response


class AddressViewSet(viewsets.ViewSet):
    """The caller's address book"""

    permission_classes = [IsAuthenticated]

    def get_service(self):
        return container.address_service()

    @extend_schema(
        operation_id="addresses_list",
        summary="List own addresses",
        description="Default addresses first, then newest.",
        parameters=[OpenApiParameter(name="type", type=str, enum=["shipping", "billing"])],
        responses={200: AddressSerializer(many=True)},
        tags=["Addresses"],
    )
    def list(self, request):
        result = self.get_service().list_addresses(request.user, request.query_params.get("type"))
        if not result.ok:
            return error_response(result)

        return Response(AddressSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="addresses_retrieve",
        summary="Get an address",
        responses={
            200: AddressSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Address of another user"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Address not found"),
        },
        tags=["Addresses"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_owned_address(request.user, pk)
        if not result.ok:
            return error_response(result)

        return Response(AddressSerializer(result.value).data)

    @extend_schema(
        operation_id="addresses_create",
        summary="Add an address",
        description="The first address of a type becomes the default for that type.",
        request=AddressSerializer,
        responses={201: AddressSerializer},
        tags=["Addresses"],
    )
    def create(self, request):
        serializer = AddressSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().create_address(request.user, serializer.validated_data)
        if not result.ok:
            return error_response(result)

        return Response(AddressSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="addresses_update",
        summary="Edit an address",
        request=AddressSerializer,
        responses={
            200: AddressSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Address of another user"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Address not found"),
        },
        tags=["Addresses"],
    )
    def update(self, request, pk=None):
        serializer = AddressSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().update_address(request.user, pk, serializer.validated_data)
        if not result.ok:
            return error_response(result)

        return Response(AddressSerializer(result.value).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    @extend_schema(
        operation_id="addresses_destroy",
        summary="Delete an address",
        responses={
            204: OpenApiResponse(description="Address deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Address of another user"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Address not found"),
        },
        tags=["Addresses"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_address(request.user, pk)
        if not result.ok:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="addresses_set_default",
        summary="Make an address the default of its type",
        request=None,
        responses={200: AddressSerializer},
        tags=["Addresses"],
    )
    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        result = self.get_service().set_default(request.user, pk)
        if not result.ok:
            return error_response(result)

        return Response(AddressSerializer(result.value).data)
