"""
Data access for the identity store, franchise store and order ledger.
Every function takes the request's AsyncSession and commits its own writes.
"""

from pizza_service.crud.users import (
    authenticate_user,
    create_user,
    ensure_default_admin,
    get_user,
    get_user_by_email,
    list_users,
    update_user,
)
from pizza_service.crud.franchises import (
    create_franchise,
    create_store,
    delete_franchise,
    delete_store,
    get_franchise,
    list_franchises,
    list_user_franchises,
)
from pizza_service.crud.orders import (
    create_order,
    list_menu,
    list_orders,
    save_menu_item,
)

__all__ = [
    "authenticate_user",
    "create_user",
    "ensure_default_admin",
    "get_user",
    "get_user_by_email",
    "list_users",
    "update_user",
    "create_franchise",
    "create_store",
    "delete_franchise",
    "delete_store",
    "get_franchise",
    "list_franchises",
    "list_user_franchises",
    "create_order",
    "list_menu",
    "list_orders",
    "save_menu_item",
]
