# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import employee, plan, activity, review_draft, performance_rating

# Explicit class exports for cleaner imports
from .employee import Employee
from .plan import Plan
from .activity import Activity
from .review_draft import ReviewDraft
from .performance_rating import PerformanceRating

__all__ = [
    "Employee",
    "Plan",
    "Activity",
    "ReviewDraft",
    "PerformanceRating",
]
