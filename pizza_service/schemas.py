"""
Pydantic Schemas for Request/Response Validation

Bodies travel in camelCase (``franchiseId``, ``reportUrl``); every schema
also accepts the snake_case field names.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from pizza_service.core.policy import Role


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# AUTH & USERS
# =============================================================================

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["pizza diner"])
    email: EmailStr = Field(..., examples=["d@jwt.com"])
    password: str = Field(..., min_length=1, max_length=128)


class LoginRequest(CamelModel):
    """Credentials are checked, not validated: a malformed email fails login."""
    email: str = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class RoleIn(CamelModel):
    role: Role
    franchise_id: Optional[int] = None

    @model_validator(mode="after")
    def check_scope(self) -> "RoleIn":
        if (self.role == Role.FRANCHISEE) != (self.franchise_id is not None):
            raise ValueError("franchiseId is required for, and only allowed on, the franchisee role")
        return self


class UserUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1, max_length=128)
    roles: Optional[List[RoleIn]] = None


class UserOut(CamelModel):
    """A user as returned to clients: never includes the password."""
    id: int
    name: str
    email: str
    roles: List[dict[str, Any]]


class AuthResponse(CamelModel):
    user: UserOut
    token: str


class MessageResponse(CamelModel):
    message: str


# =============================================================================
# FRANCHISES & STORES
# =============================================================================

class AdminRef(CamelModel):
    email: EmailStr


class FranchiseCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["pizzaPocket"])
    admins: List[AdminRef] = Field(default_factory=list)


class AdminOut(CamelModel):
    id: int
    name: str
    email: str


class StoreCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, examples=["SLC"])


class StoreOut(CamelModel):
    id: int
    name: str


class FranchiseOut(CamelModel):
    id: int
    name: str
    admins: List[AdminOut]
    stores: List[StoreOut]


class FranchiseListResponse(CamelModel):
    franchises: List[FranchiseOut]
    more: bool


# =============================================================================
# MENU & ORDERS
# =============================================================================

class MenuItemIn(CamelModel):
    """Menu item to add, or to replace when ``id`` names an existing item."""
    id: Optional[int] = None
    title: str = Field(..., min_length=1, max_length=255, examples=["Veggie"])
    description: Optional[str] = Field(None, examples=["A garden of delight"])
    image: Optional[str] = Field(None, max_length=500, examples=["pizza1.png"])
    price: float = Field(..., ge=0, examples=[0.0038])


class MenuItemOut(CamelModel):
    id: int
    title: str
    description: Optional[str]
    image: Optional[str]
    price: float


class OrderItemIn(CamelModel):
    menu_id: int
    description: Optional[str] = Field(None, max_length=255)


class OrderCreate(CamelModel):
    franchise_id: int
    store_id: int
    items: List[OrderItemIn] = Field(..., min_length=1)


class OrderItemOut(CamelModel):
    id: int
    menu_id: int
    description: str
    price: float


class OrderOut(CamelModel):
    id: int
    franchise_id: int
    store_id: int
    date: Optional[datetime] = Field(None, validation_alias="created_at")
    items: List[OrderItemOut]


class OrderCreateResponse(CamelModel):
    order: OrderOut
    jwt: str
    report_url: Optional[str] = None


class OrderListResponse(CamelModel):
    diner_id: int
    orders: List[OrderOut]
    page: int


# =============================================================================
# SERVICE
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    order_factory: str
    timestamp: datetime


# =============================================================================
# CONVERTERS
# =============================================================================

def user_to_out(user) -> UserOut:
    """Sanitized view of a User row."""
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        roles=[assignment.to_dict() for assignment in user.role_assignments],
    )


def franchise_to_out(franchise) -> FranchiseOut:
    return FranchiseOut(
        id=franchise.id,
        name=franchise.name,
        admins=[
            AdminOut(id=role.user.id, name=role.user.name, email=role.user.email)
            for role in franchise.admin_roles
        ],
        stores=[StoreOut.model_validate(store) for store in franchise.stores],
    )
