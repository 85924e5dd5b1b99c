from fastapi import APIRouter

from pizza_service.api import (
    auth,
    users,
    franchises,
    orders,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(franchises.router)
api_router.include_router(orders.router)
