from django.contrib.auth import get_user_model
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import ErrorResponseSerializer, PaginatedResponseSerializer
from marketplace.permissions import IsAdminUser
from utils.api import error_response, query_int

from .serializers import AdminNotificationCreateSerializer, NotificationSerializer


TRUTHY = ("1", "true", "yes", "on")


class NotificationViewSet(viewsets.ViewSet):
    """The caller's notification center"""

    permission_classes = [IsAuthenticated]

    def get_service(self):
        return container.notification_service()

    def get_permissions(self):
        if self.action == "create":
            return [IsAuthenticated(), IsAdminUser()]
        return super().get_permissions()

    @extend_schema(
        operation_id="notifications_list",
        summary="List own notifications",
        parameters=[
            OpenApiParameter(name="unread", type=bool, description="Only unread notifications"),
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="page_size", type=int, description="Items per page (default: 20, max: 100)"),
        ],
        responses={200: OpenApiResponse(response=PaginatedResponseSerializer, description="Newest first")},
        tags=["Notifications"],
    )
    def list(self, request):
        unread_only = str(request.query_params.get("unread", "")).lower() in TRUTHY
        result = self.get_service().list_for_user(
            request.user,
            unread_only=unread_only,
            page=query_int(request, "page", 1),
            page_size=query_int(request, "page_size", 20, maximum=100),
        )
        if not result.ok:
            return error_response(result)

        response_data = result.value
        response_data["results"] = NotificationSerializer(result.value["results"], many=True).data
        return Response(response_data)

    @extend_schema(
        operation_id="notifications_create",
        summary="Send a notification to a user (admin)",
        request=AdminNotificationCreateSerializer,
        responses={
            201: NotificationSerializer,
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admins only"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="User not found"),
        },
        tags=["Notifications"],
    )
    def create(self, request):
        serializer = AdminNotificationCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        User = get_user_model()
        recipient = User.objects.filter(id=data["user_id"]).first()
        if recipient is None:
            return Response(
                {"detail": f"User {data['user_id']} not found", "code": "user_not_found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        result = self.get_service().notify_user(
            recipient,
            type=data["type"],
            title=data["title"],
            message=data["message"],
            related_id=data.get("reference_id", ""),
            related_type=data.get("reference_type", ""),
            action_url=data.get("action_url", ""),
        )
        if not result.ok:
            return error_response(result)

        return Response(NotificationSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="notifications_destroy",
        summary="Delete own notification",
        responses={
            204: OpenApiResponse(description="Deleted"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Notification not found"),
        },
        tags=["Notifications"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete(request.user, pk)
        if not result.ok:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="notifications_unread_count",
        summary="Number of unread notifications",
        tags=["Notifications"],
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        result = self.get_service().unread_count(request.user)
        if not result.ok:
            return error_response(result)

        return Response({"unread_count": result.value})

    @extend_schema(
        operation_id="notifications_mark_read",
        summary="Mark a notification read",
        request=None,
        responses={
            200: NotificationSerializer,
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Notification not found"),
        },
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        result = self.get_service().mark_read(request.user, pk)
        if not result.ok:
            return error_response(result)

        return Response(NotificationSerializer(result.value).data)

    @extend_schema(
        operation_id="notifications_mark_all_read",
        summary="Mark every notification read",
        request=None,
        tags=["Notifications"],
    )
    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        result = self.get_service().mark_all_read(request.user)
        if not result.ok:
            return error_response(result)

        return Response({"updated": result.value})
