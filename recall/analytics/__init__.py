"""
Analytics package exports.
"""

from recall.analytics.service import build_review_dashboard
from recall.analytics.types import ReviewDashboard

__all__ = [
    "build_review_dashboard",
    "ReviewDashboard",
]
