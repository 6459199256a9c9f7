"""
services/tenant_service.py
--------------------------
Business logic for tenant management.

A tenant cannot be deleted while users still belong to it; the
users.tenant_id foreign key (ON DELETE NO ACTION) backs this up at the
database level.
"""

from typing import List, Optional, Tuple

from auth_service.core.errors import ConflictError, NotFoundError
from auth_service.core.logging import get_logger
from auth_service.models.tenant import Tenant
from auth_service.schemas.tenant import TenantCreate, TenantUpdate
from auth_service.stores.tenant_store import TenantStore

logger = get_logger(__name__)


class TenantService:
    def __init__(self, tenants: TenantStore) -> None:
        self.tenants = tenants

    async def create_tenant(self, data: TenantCreate) -> Tenant:
        tenant = await self.tenants.create(name=data.name, address=data.address)
        await self.tenants.commit()
        logger.info("Tenant created", tenant_id=tenant.id, name=tenant.name)
        return tenant

    async def get_tenant(self, tenant_id: int) -> Tenant:
        tenant = await self.tenants.get(tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    async def update_tenant(self, tenant_id: int, data: TenantUpdate) -> Tenant:
        tenant = await self.get_tenant(tenant_id)
        fields = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        tenant = await self.tenants.update(tenant, fields)
        await self.tenants.commit()
        logger.info("Tenant updated", tenant_id=tenant.id)
        return tenant

    async def list_tenants(
        self, *, page: int, per_page: int, q: Optional[str] = None
    ) -> Tuple[List[Tenant], int]:
        return await self.tenants.list(page=page, per_page=per_page, q=q.strip() if q else None)

    async def delete_tenant(self, tenant_id: int) -> None:
        tenant = await self.get_tenant(tenant_id)
        users = await self.tenants.count_users(tenant_id)
        if users:
            raise ConflictError(f"Tenant {tenant_id} still has {users} user(s)")
        await self.tenants.delete(tenant)
        await self.tenants.commit()
        logger.info("Tenant deleted", tenant_id=tenant_id)
