from .approval_service import ApprovalService
from .catalog_service import CatalogService
from .question_service import QuestionService
from .review_service import ReviewService


__all__ = [
    "ApprovalService",
    "CatalogService",
    "QuestionService",
    "ReviewService",
]
