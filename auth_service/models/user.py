"""
models/user.py
--------------
User ORM model with roles and an optional tenant binding.

Role design:
  - 'admin':    Manages users and tenants. Belongs to no tenant.
  - 'manager':  Bound to exactly one tenant.
  - 'customer': Default role for self-registered accounts.

The password column stores bcrypt hashes only; plain text is
never stored and never logged.
"""

from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from auth_service.db.base import Base, TimestampMixin


class Role(str, PyEnum):
    admin = "admin"
    manager = "manager"
    customer = "customer"


class User(Base, TimestampMixin):
    __tablename__ = "users"
    # ids travel as the sub claim; SQLite must not reuse a deleted user's id
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Role.customer.value
    )
    tenant_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="NO ACTION"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
