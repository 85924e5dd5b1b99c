"""
SQLAlchemy Database Models

Users and their role assignments, franchises with their stores, the
global menu, diner orders, and the active session set.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from pizza_service.core.policy import Role, RoleAssignment
from pizza_service.database import Base


class User(Base):
    """A diner account. Passwords are only ever stored hashed."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    roles = relationship(
        "UserRole",
        back_populates="user",
        order_by="UserRole.id",
        cascade="all, delete-orphan",
    )

    @property
    def role_assignments(self) -> list[RoleAssignment]:
        return [role.assignment for role in self.roles]

    def __repr__(self):
        return f"<User #{self.id} - {self.email}>"


class UserRole(Base):
    """
    One role assignment of a user.

    Franchisee assignments carry the franchise they are scoped to; a
    franchise's admin list is read from these rows.
    """
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(Role), nullable=False)
    franchise_id = Column(
        Integer,
        ForeignKey("franchises.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    user = relationship("User", back_populates="roles")

    @property
    def assignment(self) -> RoleAssignment:
        return RoleAssignment(self.role, self.franchise_id)

    def __repr__(self):
        return f"<UserRole user={self.user_id} {self.role.value} franchise={self.franchise_id}>"


class Franchise(Base):
    __tablename__ = "franchises"
    # Deleted franchise ids are never handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True, index=True)

    stores = relationship(
        "Store",
        back_populates="franchise",
        order_by="Store.id",
        cascade="all, delete-orphan",
    )
    admin_roles = relationship("UserRole", order_by="UserRole.id", viewonly=True)

    def __repr__(self):
        return f"<Franchise #{self.id} - {self.name}>"


class Store(Base):
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    franchise_id = Column(
        Integer,
        ForeignKey("franchises.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)

    franchise = relationship("Franchise", back_populates="stores")

    def __repr__(self):
        return f"<Store #{self.id} - {self.name} (franchise {self.franchise_id})>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    price = Column(Float, nullable=False)


class Order(Base):
    """
    A placed diner order.

    Franchise and store ids are kept as plain values so order history
    survives the deletion of the franchise it was placed with.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    diner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    franchise_id = Column(Integer, nullable=False, index=True)
    store_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Order #{self.id} - diner {self.diner_id}>"


class OrderItem(Base):
    """Line item with the description and price captured at order time."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, nullable=False)
    description = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")


class Session(Base):
    """
    An active session token.

    ``token_id`` is the ``jti`` claim of the issued JWT; a token whose row
    is gone has been revoked.
    """
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    token_id = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    roles = Column(Text, nullable=False)  # JSON role snapshot
    issued_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<Session {self.token_id} - user {self.user_id}>"
