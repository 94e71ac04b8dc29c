from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CreateReviewRequestSerializer,
    ErrorResponseSerializer,
    ModerateQuestionRequestSerializer,
    TextRequestSerializer,
)
from marketplace.catalog.api.serializers.review_serializers import (
    ProductAnswerSerializer,
    ProductQuestionSerializer,
    ProductReviewSerializer,
    ReviewResponseSerializer,
)
from marketplace.permissions import IsAdminUser
from marketplace.services import QuestionService, ReviewService
from utils.api import error_response


class ReviewViewSet(viewsets.ViewSet):
    """Edit, delete and respond to reviews. Listing and writing live under the product."""

    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_service(self) -> ReviewService:
        return container.review_service()

    @extend_schema(
        operation_id="reviews_update",
        summary="Edit own review",
        request=CreateReviewRequestSerializer,
        responses={
            200: OpenApiResponse(response=ProductReviewSerializer, description="Review updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Validation error"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the author"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Review not found"),
        },
        tags=["Marketplace - Reviews"],
    )
    def update(self, request, pk=None):
        result = self.get_service().update_review(pk, request.user, request.data)
        if not result.ok:
            return error_response(result)

        return Response(ProductReviewSerializer(result.value).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    @extend_schema(
        operation_id="reviews_destroy",
        summary="Delete a review (author or admin)",
        responses={
            204: OpenApiResponse(description="Review deleted"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the author"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Review not found"),
        },
        tags=["Marketplace - Reviews"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_review(pk, request.user)
        if not result.ok:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="reviews_responses",
        summary="List or add responses to a review",
        description="""
        **GET:** responses, oldest first.

        **POST:** `text`. Only the seller of the product or an admin may respond.
        """,
        request=TextRequestSerializer,
        responses={
            200: OpenApiResponse(response=ReviewResponseSerializer(many=True), description="Responses retrieved"),
            201: OpenApiResponse(response=ReviewResponseSerializer, description="Response added"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Review not found"),
        },
        tags=["Marketplace - Reviews"],
    )
    @action(detail=True, methods=["get", "post"])
    def responses(self, request, pk=None):
        service = self.get_service()

        if request.method == "POST":
            result = service.create_response(pk, request.user, request.data.get("text"))
            if not result.ok:
                return error_response(result)
            return Response(ReviewResponseSerializer(result.value).data, status=status.HTTP_201_CREATED)

        result = service.list_responses(pk)
        if not result.ok:
            return error_response(result)

        return Response(ReviewResponseSerializer(result.value, many=True).data)


class QuestionViewSet(viewsets.ViewSet):
    """Answer and moderate product questions"""

    permission_classes = [IsAuthenticated]

    def get_service(self) -> QuestionService:
        return container.question_service()

    @extend_schema(
        operation_id="questions_pending",
        summary="Questions waiting for moderation (admin)",
        responses={200: ProductQuestionSerializer(many=True)},
        tags=["Marketplace - Questions"],
    )
    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated, IsAdminUser])
    def pending(self, request):
        result = self.get_service().list_pending()
        if not result.ok:
            return error_response(result)

        return Response(ProductQuestionSerializer(result.value, many=True).data)

    @extend_schema(
        operation_id="questions_answer",
        summary="Answer a question",
        description="""
        **What it receives:**
        - `text` of at least 5 characters

        **What it returns:**
        - The answer. The question is marked answered and the asker is notified.
        """,
        request=TextRequestSerializer,
        responses={
            201: OpenApiResponse(response=ProductAnswerSerializer, description="Answer added"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the seller"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Question not found"),
        },
        tags=["Marketplace - Questions"],
    )
    @action(detail=True, methods=["post"])
    def answer(self, request, pk=None):
        result = self.get_service().answer_question(pk, request.user, request.data.get("text"))
        if not result.ok:
            return error_response(result)

        return Response(ProductAnswerSerializer(result.value).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="questions_moderate",
        summary="Approve or hide a question (admin)",
        request=ModerateQuestionRequestSerializer,
        responses={
            200: OpenApiResponse(response=ProductQuestionSerializer, description="Question moderated"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Admins only"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Question not found"),
        },
        tags=["Marketplace - Questions"],
    )
    @action(detail=True, methods=["post"])
    def moderate(self, request, pk=None):
        input_serializer = ModerateQuestionRequestSerializer(data=request.data)
        if not input_serializer.is_valid():
            return Response(input_serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = self.get_service().moderate_question(
            pk, request.user, input_serializer.validated_data.get("is_approved")
        )
        if not result.ok:
            return error_response(result)

        return Response(ProductQuestionSerializer(result.value).data)
