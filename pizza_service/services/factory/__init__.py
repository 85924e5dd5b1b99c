"""
Order Factory Service Factory

Provides a single entry point for obtaining an order factory instance.

Usage:
    from pizza_service.services.factory import get_order_factory_service

    # MockOrderFactoryService or HttpOrderFactoryService based on ENV_MODE
    factory = get_order_factory_service()

    result = await factory.submit_order(diner, order)

Environment Switching:
    - ENV_MODE=development → MockOrderFactoryService (no network calls)
    - ENV_MODE=staging → HttpOrderFactoryService
    - ENV_MODE=production → HttpOrderFactoryService
"""

import logging
from functools import lru_cache

from pizza_service.core.config import get_settings
from pizza_service.services.factory.base import (
    BaseOrderFactoryService,
    FactoryResult,
)
from pizza_service.services.factory.mock import MockOrderFactoryService
from pizza_service.services.factory.http import HttpOrderFactoryService

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_factory_service() -> BaseOrderFactoryService:
    """
    Get the configured order factory instance.

    The instance is cached so every request shares one client
    configuration. Also used as a FastAPI dependency, which lets tests
    substitute it through ``app.dependency_overrides``.

    Raises:
        ValueError: If not in development mode and FACTORY_API_KEY is unset
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Order Factory: Using MockOrderFactoryService (development mode)")
        return MockOrderFactoryService(min_latency=0.05, max_latency=0.2)

    logger.info(
        f"Order Factory: Using HttpOrderFactoryService "
        f"({settings.env_mode.value} mode)"
    )
    return HttpOrderFactoryService()


def reset_order_factory_service() -> None:
    """
    Clear the cached order factory instance.

    The next call to get_order_factory_service() creates a new instance.
    """
    get_order_factory_service.cache_clear()
    logger.debug("Order factory cache cleared")


__all__ = [
    "get_order_factory_service",
    "reset_order_factory_service",
    "BaseOrderFactoryService",
    "FactoryResult",
    "MockOrderFactoryService",
    "HttpOrderFactoryService",
]
