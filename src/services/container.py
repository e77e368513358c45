"""
Service Container - Dependency Injection Container

Holds the service instances the API routes use. Services are created on
first access; routes receive the container through a FastAPI dependency so
tests can swap it out with app.dependency_overrides.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    """

    _goal_service: Optional[object] = field(default=None, init=False, repr=False)
    _health_analysis_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def goal_service(self):
        """Get GoalService instance (lazy-loaded)"""
        if self._goal_service is None:
            from src.services.goal_service import GoalService
            self._goal_service = GoalService()
            logger.debug("GoalService instantiated")
        return self._goal_service

    @property
    def health_analysis_service(self):
        """Get HealthAnalysisService instance (lazy-loaded)"""
        if self._health_analysis_service is None:
            from src.services.health_analysis import HealthAnalysisService
            self._health_analysis_service = HealthAnalysisService()
            logger.debug("HealthAnalysisService instantiated")
        return self._health_analysis_service


# Global container instance (initialized by the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() before using services."
        )
    return _container


def init_container() -> ServiceContainer:
    """
    Initialize the global service container.

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer()

    logger.info("Service container initialized")
    return _container
