"""
HTTP Order Factory Implementation

Production implementation that submits orders to the external factory
service. Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - FACTORY_URL points at the factory
    - FACTORY_API_KEY must be set

Wire format:
    POST {FACTORY_URL}/api/order
    Authorization: Bearer {FACTORY_API_KEY}
    {"diner": {...}, "order": {...}}  ->  {"reportUrl": ..., "jwt": ...}
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from pizza_service.core.config import get_settings
from pizza_service.services.factory.base import (
    BaseOrderFactoryService,
    FactoryResult,
)

logger = logging.getLogger(__name__)


class HttpOrderFactoryService(BaseOrderFactoryService):
    """
    Order factory client over HTTP.

    Each submission is a single attempt; timeouts and error responses are
    reported as failed FactoryResults, never retried here.

    Example:
        >>> service = HttpOrderFactoryService()
        >>> result = await service.submit_order(diner, order)
        >>> print(result.report_url)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Factory base URL (default: FACTORY_URL)
            api_key: Factory API key (default: FACTORY_API_KEY)
            timeout: Seconds per call (default: FACTORY_TIMEOUT_SECONDS)
            transport: Custom httpx transport (tests use httpx.MockTransport)

        Raises:
            ValueError: If no API key is configured
        """
        settings = get_settings()

        self._base_url = (base_url or settings.factory_url).rstrip("/")
        self._api_key = api_key or settings.factory_api_key
        self._timeout = timeout or settings.factory_timeout_seconds
        self._transport = transport

        if not self._api_key:
            raise ValueError(
                "FACTORY_API_KEY is required outside development mode. "
                "Set it in your .env file or environment variables."
            )

        logger.info(f"HttpOrderFactoryService initialized ({self._base_url})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "http"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    @staticmethod
    def _json_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def submit_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FactoryResult:
        start_time = datetime.now()

        logger.info(f"Factory: Submitting order {order.get('id')} for diner {diner.get('id')}")

        try:
            async with self._client() as client:
                response = await client.post(
                    "/api/order",
                    json={"diner": diner, "order": order},
                )
        except httpx.HTTPError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Factory: Request failed - {type(e).__name__}: {e}")
            return FactoryResult(
                success=False,
                error_message=f"Order factory unreachable: {type(e).__name__}",
                response_time_ms=elapsed_ms,
            )

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        body = self._json_body(response)

        if response.is_error:
            logger.error(f"Factory: Order {order.get('id')} rejected with {response.status_code}")
            return FactoryResult(
                success=False,
                report_url=body.get("reportUrl"),
                error_message=body.get("message") or f"Order factory responded {response.status_code}",
                status_code=response.status_code,
                response_time_ms=elapsed_ms,
            )

        if not body.get("jwt"):
            logger.error(f"Factory: Order {order.get('id')} accepted without a jwt")
            return FactoryResult(
                success=False,
                report_url=body.get("reportUrl"),
                error_message="Order factory response is missing the order jwt",
                status_code=response.status_code,
                response_time_ms=elapsed_ms,
            )

        logger.info(f"Factory: Order {order.get('id')} fulfilled in {elapsed_ms:.0f}ms")

        return FactoryResult(
            success=True,
            jwt=body["jwt"],
            report_url=body.get("reportUrl"),
            status_code=response.status_code,
            response_time_ms=elapsed_ms,
        )

    async def health_check(self) -> bool:
        """
        The factory counts as healthy when it answers at all without a
        server error.
        """
        try:
            async with self._client() as client:
                response = await client.get("/")
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.error(f"Factory health check failed: {e}")
            return False
