# Application Package
from .queue_builder import count_due, estimate_minutes, select_by_ids, select_due
from .retention import RetentionPoint, RetentionProjector, build_decay_profiles
from .review_service import ReviewService
from .scheduler import apply_rating

__all__ = [
    "apply_rating",
    "select_due",
    "select_by_ids",
    "count_due",
    "estimate_minutes",
    "RetentionProjector",
    "RetentionPoint",
    "build_decay_profiles",
    "ReviewService",
]
