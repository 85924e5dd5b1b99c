"""
Mock Order Factory Implementation

Simulates the order factory without network calls. Used in development
mode (ENV_MODE=development) and by the test suite to:
    - Run the complete ordering flow locally
    - Exercise the factory failure path on demand

Behavior:
    - Optional simulated latency
    - Fails a configurable share of submissions
    - Issues a real HS256-signed order JWT and a report URL
"""

import asyncio
from collections import deque
import random
import uuid
import logging
from datetime import datetime, timezone
from typing import Any

from jose import jwt

from pizza_service.services.factory.base import (
    BaseOrderFactoryService,
    FactoryResult,
)

logger = logging.getLogger(__name__)


class MockOrderFactoryService(BaseOrderFactoryService):
    """
    Mock implementation of the order factory.

    Attributes:
        failure_rate: Probability of a simulated rejection (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> service = MockOrderFactoryService(failure_rate=1.0)
        >>> result = await service.submit_order(diner, order)
        >>> print(result.success)
        False
    """

    REPORT_BASE_URL = "https://factory.mock/report"

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        signing_key: str = "mock-factory-key",
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self._signing_key = signing_key
        self.submitted: deque[dict[str, Any]] = deque(maxlen=100)

        logger.info(
            f"MockOrderFactoryService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    async def submit_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FactoryResult:
        latency_ms = await self._simulate_latency()
        self.submitted.append({"diner": diner, "order": order})
        report_url = f"{self.REPORT_BASE_URL}/{uuid.uuid4().hex}"

        if self._should_fail():
            logger.debug(f"Mock: Factory rejected order {order.get('id')}")
            return FactoryResult(
                success=False,
                report_url=report_url,
                error_message="Order factory rejected the order",
                status_code=500,
                response_time_ms=latency_ms,
            )

        token = jwt.encode(
            {
                "vendor": {"id": "mock", "name": "Mock Factory"},
                "diner": diner,
                "order": order,
                "iat": datetime.now(timezone.utc),
            },
            self._signing_key,
            algorithm="HS256",
        )

        logger.info(f"Mock: Order {order.get('id')} fulfilled - {report_url}")

        return FactoryResult(
            success=True,
            jwt=token,
            report_url=report_url,
            status_code=200,
            response_time_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        """The mock factory is always available."""
        logger.debug("Mock: Health check passed")
        return True
