"""
stores/tenant_store.py
----------------------
Persistence for Tenant rows.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select

from auth_service.models.tenant import Tenant
from auth_service.models.user import User
from auth_service.stores.base import BaseStore


class TenantStore(BaseStore[Tenant]):
    model = Tenant

    async def create(self, *, name: str, address: str) -> Tenant:
        return await self.add(Tenant(name=name, address=address))

    async def count_users(self, tenant_id: int) -> int:
        total = await self.db.scalar(
            select(func.count()).select_from(User).where(User.tenant_id == tenant_id)
        )
        return int(total or 0)

    async def list(
        self, *, page: int = 1, per_page: int = 6, q: Optional[str] = None
    ) -> Tuple[List[Tenant], int]:
        stmt = select(Tenant)
        if q:
            term = f"%{q.lower()}%"
            stmt = stmt.where(or_(Tenant.name.ilike(term), Tenant.address.ilike(term)))
        return await self.paginate(stmt.order_by(Tenant.id), page=page, per_page=per_page)
