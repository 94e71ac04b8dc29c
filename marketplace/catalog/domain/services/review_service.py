"""
ReviewService - Product Review Management

Handles listing, create, update and delete of product reviews, plus the
responses sellers and admins post under them.
"""

import logging
from typing import Any, Dict, List

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count

from marketplace.catalog.domain.models import Product, ProductReview, ReviewResponse
from utils.rbac import is_admin, owns_store
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

from .catalog_service import paginate


logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    """
    Service for managing product reviews.

    Responsibilities:
    - List reviews of a product with rating summary
    - Create review (one per user and product)
    - Update / delete review (author only; admins may delete)
    - List / create review responses (product seller or admin)
    """

    @BaseService.log_performance
    def list_reviews(self, product_id, page: int = 1, page_size: int = 20) -> ServiceResult[Dict[str, Any]]:
        result = self._load_visible_product(product_id)
        if not result.ok:
            return result
        product = result.value

        queryset = (
            ProductReview.objects.filter(product=product)
            .select_related("user")
            .prefetch_related("responses__user")
            .order_by("-created_at")
        )
        listing = paginate(queryset, page, page_size)
        summary = ProductReview.objects.filter(product=product).aggregate(average=Avg("rating"), total=Count("id"))
        listing["average_rating"] = round(summary["average"], 2) if summary["average"] is not None else None
        return service_ok(listing)

    @BaseService.log_performance
    def create_review(self, user, product_id, data: Dict[str, Any]) -> ServiceResult[ProductReview]:
        """
        Create a new review for a product.

        Validates:
        - Product exists and is publicly visible
        - Rating is an integer 1-5; title and comment are present
        - User hasn't already reviewed the product

        Returns:
            ServiceResult with created ProductReview instance
        """
        result = self._load_visible_product(product_id)
        if not result.ok:
            return result
        product = result.value

        fields = self._clean(data)
        if not fields.ok:
            return fields

        if ProductReview.objects.filter(product=product, user=user).exists():
            return service_err(ErrorCodes.REVIEW_EXISTS, "You have already reviewed this product")

        try:
            with transaction.atomic():
                review = ProductReview.objects.create(product=product, user=user, **fields.value)
        except IntegrityError:
            return service_err(ErrorCodes.REVIEW_EXISTS, "You have already reviewed this product")
        except Exception as e:
            self.logger.error(f"Error creating review for product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Review {review.id} created for product {product.id} by user {user.id}")
        return service_ok(review)

    @BaseService.log_performance
    def update_review(self, review_id, user, data: Dict[str, Any]) -> ServiceResult[ProductReview]:
        result = self._load_review(review_id)
        if not result.ok:
            return result
        review = result.value

        if review.user_id != user.id:
            return service_err(ErrorCodes.PERMISSION_DENIED, "You can only edit your own review")

        fields = self._clean(data, partial=True)
        if not fields.ok:
            return fields

        for name, value in fields.value.items():
            setattr(review, name, value)
        review.save()
        return service_ok(review)

    @BaseService.log_performance
    def delete_review(self, review_id, user) -> ServiceResult[None]:
        result = self._load_review(review_id)
        if not result.ok:
            return result
        review = result.value

        if review.user_id != user.id and not is_admin(user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "You can only delete your own review")

        review.delete()
        self.logger.info(f"Review {review_id} deleted by user {user.id}")
        return service_ok()

    def list_responses(self, review_id) -> ServiceResult[List[ReviewResponse]]:
        result = self._load_review(review_id)
        if not result.ok:
            return result
        return service_ok(list(result.value.responses.select_related("user").order_by("created_at")))

    @BaseService.log_performance
    def create_response(self, review_id, user, text: str) -> ServiceResult[ReviewResponse]:
        """Respond to a review as the product's seller or an admin."""
        result = self._load_review(review_id)
        if not result.ok:
            return result
        review = result.value

        if not (owns_store(user, review.product.store) or is_admin(user)):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only the seller or an admin can respond to reviews")

        text = (text or "").strip()
        if not text:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Response text is required")

        response = ReviewResponse.objects.create(review=review, user=user, response=text)
        self.logger.info(f"Response {response.id} added to review {review.id} by user {user.id}")
        return service_ok(response)

    @staticmethod
    def _clean(data: Dict[str, Any], partial: bool = False) -> ServiceResult[Dict[str, Any]]:
        fields = {}

        if "rating" in data or not partial:
            try:
                rating = int(data.get("rating"))
            except (TypeError, ValueError):
                return service_err(ErrorCodes.VALIDATION_ERROR, "Rating must be a number between 1 and 5")
            if not 1 <= rating <= 5:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Rating must be between 1 and 5")
            fields["rating"] = rating

        for name in ("title", "comment"):
            if name in data or not partial:
                value = (data.get(name) or "").strip()
                if not value:
                    return service_err(ErrorCodes.VALIDATION_ERROR, f"Review {name} is required")
                fields[name] = value

        return service_ok(fields)

    def _load_visible_product(self, product_id) -> ServiceResult[Product]:
        try:
            return service_ok(Product.objects.get(id=product_id, approval_status="approved", is_active=True))
        except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

    def _load_review(self, review_id) -> ServiceResult[ProductReview]:
        try:
            return service_ok(ProductReview.objects.select_related("product__store", "user").get(id=review_id))
        except (ProductReview.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.REVIEW_NOT_FOUND, f"Review {review_id} not found")
