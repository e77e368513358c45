"""
Service Layer Package

Business logic between the HTTP routes and the database queries.

Core Services:
- GoalService: Goals, progress, milestones, dashboard (drives streaks and badges)
- HealthAnalysisService: Health metric storage, interpretation and trends
"""

from src.services.container import ServiceContainer, get_container, init_container
from src.services.goal_service import GoalService
from src.services.health_analysis import HealthAnalysisService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "GoalService",
    "HealthAnalysisService",
]
