"""
                        Services Module

External collaborators behind the hybrid architecture pattern: each has a
Mock (development) and a Real (production) implementation.

Services:
    - factory: order fulfillment by the external order factory
"""

from pizza_service.services.factory import get_order_factory_service

__all__ = ["get_order_factory_service"]
