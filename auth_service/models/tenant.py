"""
models/tenant.py
----------------
Tenant (organisation) ORM model.

Users reference a tenant through users.tenant_id with ON DELETE NO ACTION:
a tenant cannot be removed while users still belong to it.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from auth_service.db.base import Base, TimestampMixin


class Tenant(Base, TimestampMixin):
    __tablename__ = "tenants"
    # no rowid reuse on SQLite
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} name={self.name}>"
