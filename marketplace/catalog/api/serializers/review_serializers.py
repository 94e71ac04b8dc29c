from rest_framework import serializers

from marketplace.catalog.api.serializers.user_serializers import MinimalUserSerializer
from marketplace.catalog.domain.models.interaction import ProductAnswer, ProductQuestion, ProductReview, ReviewResponse


class ReviewResponseSerializer(serializers.ModelSerializer):
    user = MinimalUserSerializer(read_only=True)

    class Meta:
        model = ReviewResponse
        fields = ["id", "user", "response", "created_at"]
        read_only_fields = fields


class ProductReviewSerializer(serializers.ModelSerializer):
    reviewer = MinimalUserSerializer(source="user", read_only=True)
    responses = ReviewResponseSerializer(many=True, read_only=True)

    class Meta:
        model = ProductReview
        fields = ["id", "product", "reviewer", "rating", "title", "comment", "responses", "created_at", "updated_at"]
        read_only_fields = fields


class ProductAnswerSerializer(serializers.ModelSerializer):
    user = MinimalUserSerializer(read_only=True)

    class Meta:
        model = ProductAnswer
        fields = ["id", "user", "answer_text", "created_at"]
        read_only_fields = fields


class ProductQuestionSerializer(serializers.ModelSerializer):
    user = MinimalUserSerializer(read_only=True)
    answers = serializers.SerializerMethodField()

    class Meta:
        model = ProductQuestion
        fields = ["id", "product", "user", "question_text", "is_approved", "is_answered", "answers", "created_at"]
        read_only_fields = fields

    def get_answers(self, obj):
        # list_questions prefetches approved answers; pending-queue rows have none loaded
        answers = getattr(obj, "approved_answers", None)
        if answers is None:
            answers = obj.answers.filter(is_approved=True).select_related("user")
        return ProductAnswerSerializer(answers, many=True).data
