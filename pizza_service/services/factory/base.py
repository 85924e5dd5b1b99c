"""
Order Factory Service Abstract Base Class

Defines the interface contract for all order factory implementations.
Both MockOrderFactoryService and HttpOrderFactoryService implement these
methods, so the order endpoints behave the same whichever one is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between the mock and the real factory
    - Facilitates testing without the external service
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class FactoryResult:
    """
    Standardized result of submitting an order to the factory.

    Attributes:
        success: Whether the factory accepted the order
        jwt: Signed order token issued by the factory
        report_url: Where the factory reports on this order (also set on
            failure when the factory provides one)
        error_message: Error description if the submission failed
        status_code: HTTP status returned by the factory, if any
        response_time_ms: Time taken by the factory call
    """
    success: bool
    jwt: Optional[str] = None
    report_url: Optional[str] = None
    error_message: Optional[str] = None
    status_code: Optional[int] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "jwt": self.jwt,
            "report_url": self.report_url,
            "error_message": self.error_message,
            "status_code": self.status_code,
            "response_time_ms": self.response_time_ms,
        }


class BaseOrderFactoryService(ABC):
    """
    Abstract base class for order factory services.

    Example:
        >>> service = get_order_factory_service()  # Mock or HTTP
        >>> result = await service.submit_order(
        ...     diner={"id": 4, "name": "pizza diner", "email": "d@jwt.com"},
        ...     order={"franchiseId": 1, "storeId": 1, "items": [...]},
        ... )
        >>> if result.success:
        ...     print(result.report_url)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the factory provider.

        Returns:
            str: Provider name (e.g., "mock", "http")
        """
        pass

    @abstractmethod
    async def submit_order(
        self,
        diner: dict[str, Any],
        order: dict[str, Any],
    ) -> FactoryResult:
        """
        Submit one order for fulfillment. Makes exactly one attempt.

        Args:
            diner: ``{id, name, email}`` of the ordering user
            order: The persisted order in its response shape

        Returns:
            FactoryResult: never raises for factory-side failures
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the factory.

        Returns:
            bool: True if the factory is reachable
        """
        pass
