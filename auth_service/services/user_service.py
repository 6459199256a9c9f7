"""
services/user_service.py
------------------------
Admin-side user management: create, update, list, fetch, delete.

Service layer is responsible for:
  - Enforcing business rules (unique email, tenant existence, role/tenant shape)
  - Returning domain objects (ORM models) to the route layer
  - Never returning HTTP responses (that's the route's job)
"""

from typing import List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from auth_service.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from auth_service.core.logging import get_logger
from auth_service.core.security import PasswordHasher
from auth_service.models.user import Role, User
from auth_service.schemas.user import UserCreate, UserUpdate
from auth_service.stores.tenant_store import TenantStore
from auth_service.stores.user_store import UserStore

logger = get_logger(__name__)


class UserService:
    def __init__(
        self, users: UserStore, tenants: TenantStore, hasher: PasswordHasher
    ) -> None:
        self.users = users
        self.tenants = tenants
        self.hasher = hasher

    async def _require_tenant(self, tenant_id: Optional[int]) -> None:
        if tenant_id is not None and await self.tenants.get(tenant_id) is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")

    async def get_user(self, user_id: int) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def create_user(self, data: UserCreate) -> User:
        """
        Admin-initiated user creation. Role and tenant are taken as given.
        Raises ConflictError on a taken email, NotFoundError on an unknown tenant.
        """
        if await self.users.get_by_email(data.email) is not None:
            raise ConflictError("Email is already exist")
        await self._require_tenant(data.tenant_id)

        hashed = await run_in_threadpool(self.hasher.hash, data.password)
        try:
            user = await self.users.create(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                password=hashed,
                role=data.role.value,
                tenant_id=data.tenant_id,
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to store user", error=str(exc))
            raise InternalError("Failed to store data in the database") from exc
        await self.users.commit()

        logger.info(
            "Admin created user",
            new_user_id=user.id,
            role=user.role,
            tenant_id=user.tenant_id,
        )
        return user

    async def update_user(self, user_id: int, data: UserUpdate) -> User:
        user = await self.get_user(user_id)
        fields = data.model_dump(exclude_unset=True)
        if "role" in fields and fields["role"] is not None:
            fields["role"] = fields["role"].value

        role = fields.get("role") or user.role
        tenant_id = fields["tenant_id"] if "tenant_id" in fields else user.tenant_id
        if role == Role.admin.value:
            if "tenant_id" in fields and fields["tenant_id"] is not None:
                raise ValidationError("Admin users cannot belong to a tenant")
            fields["tenant_id"] = None
        elif role == Role.manager.value and tenant_id is None:
            raise ValidationError("Manager users must belong to a tenant")
        await self._require_tenant(fields.get("tenant_id"))

        # tenant_id may be cleared explicitly; other nulls mean "leave as is"
        fields = {
            key: value
            for key, value in fields.items()
            if value is not None or key == "tenant_id"
        }
        user = await self.users.update(user, fields)
        await self.users.commit()
        logger.info("User updated", user_id=user.id, fields=sorted(fields))
        return user

    async def list_users(
        self,
        *,
        page: int,
        per_page: int,
        q: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> Tuple[List[User], int]:
        return await self.users.list(
            page=page,
            per_page=per_page,
            q=q.strip() if q else None,
            role=role.value if role else None,
        )

    async def delete_user(self, user_id: int) -> None:
        user = await self.get_user(user_id)
        await self.users.delete(user)
        await self.users.commit()
        logger.info("User deleted", user_id=user_id)
