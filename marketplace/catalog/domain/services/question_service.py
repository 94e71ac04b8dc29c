"""
QuestionService - Product questions and answers.

Buyers ask, sellers of the product's store (or admins) answer, admins
moderate. Only approved questions and answers are shown publicly.
"""

from typing import List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Prefetch

from marketplace.catalog.domain.models import Product, ProductAnswer, ProductQuestion
from utils.rbac import is_admin, owns_store
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


MIN_TEXT_LENGTH = 5


class QuestionService(BaseService):
    def __init__(self, notification_service=None):
        super().__init__()
        if notification_service is None:
            from notifications.services import NotificationService

            notification_service = NotificationService()
        self.notification_service = notification_service

    def list_questions(self, product_id) -> ServiceResult[List[ProductQuestion]]:
        """Approved questions of a product, newest first, each with approved answers oldest first."""
        result = self._load_visible_product(product_id)
        if not result.ok:
            return result

        answers = Prefetch(
            "answers",
            queryset=ProductAnswer.objects.filter(is_approved=True).select_related("user").order_by("created_at"),
            to_attr="approved_answers",
        )
        queryset = (
            ProductQuestion.objects.filter(product=result.value, is_approved=True)
            .select_related("user")
            .prefetch_related(answers)
            .order_by("-created_at")
        )
        return service_ok(list(queryset))

    def list_pending(self) -> ServiceResult[List[ProductQuestion]]:
        """Questions no admin has moderated yet."""
        queryset = ProductQuestion.objects.filter(is_approved__isnull=True).select_related("user", "product")
        return service_ok(list(queryset.order_by("created_at")))

    @BaseService.log_performance
    def ask_question(self, user, product_id, text: str) -> ServiceResult[ProductQuestion]:
        text = (text or "").strip()
        if len(text) < MIN_TEXT_LENGTH:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"Questions must be at least {MIN_TEXT_LENGTH} characters"
            )

        result = self._load_visible_product(product_id)
        if not result.ok:
            return result

        question = ProductQuestion.objects.create(product=result.value, user=user, question_text=text)
        self.logger.info(f"Question {question.id} asked on product {product_id} by user {user.id}")
        return service_ok(question)

    @BaseService.log_performance
    def answer_question(self, question_id, user, text: str) -> ServiceResult[ProductAnswer]:
        """
        Answer a question as the seller of the product's store or an admin.

        Marks the question answered and notifies the asker.
        """
        result = self._load_question(question_id)
        if not result.ok:
            return result
        question = result.value

        if not (owns_store(user, question.product.store) or is_admin(user)):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only the seller or an admin can answer questions")

        text = (text or "").strip()
        if len(text) < MIN_TEXT_LENGTH:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Answers must be at least {MIN_TEXT_LENGTH} characters")

        with transaction.atomic():
            answer = ProductAnswer.objects.create(question=question, user=user, answer_text=text)
            if not question.is_answered:
                question.is_answered = True
                question.save(update_fields=["is_answered", "updated_at"])

        self.logger.info(f"Question {question.id} answered by user {user.id}")

        notified = self.notification_service.notify_user(
            question.user,
            type="question_answered",
            title="Your question was answered",
            message=f"Your question about '{question.product.name}' has a new answer.",
            related_id=question.product_id,
            related_type="product",
            action_url=f"/urun/{question.product_id}",
        )
        if not notified.ok:
            self.logger.warning(f"Answer notification for question {question.id} failed: {notified.error_detail}")

        return service_ok(answer)

    @BaseService.log_performance
    def moderate_question(self, question_id, admin_user, is_approved: Optional[bool]) -> ServiceResult[ProductQuestion]:
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can moderate questions")

        result = self._load_question(question_id)
        if not result.ok:
            return result
        question = result.value

        question.is_approved = is_approved
        question.save(update_fields=["is_approved", "updated_at"])
        self.logger.info(f"Question {question.id} moderated by {admin_user.id}: approved={is_approved}")
        return service_ok(question)

    def _load_visible_product(self, product_id) -> ServiceResult[Product]:
        try:
            return service_ok(Product.objects.get(id=product_id, approval_status="approved", is_active=True))
        except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

    def _load_question(self, question_id) -> ServiceResult[ProductQuestion]:
        try:
            question = ProductQuestion.objects.select_related("product__store", "user").get(id=question_id)
        except (ProductQuestion.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.QUESTION_NOT_FOUND, f"Question {question_id} not found")
        return service_ok(question)
