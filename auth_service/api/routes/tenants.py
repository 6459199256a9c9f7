"""
api/routes/tenants.py
---------------------
Tenant management endpoints.

POST   /tenants       — Admin: create a tenant.
GET    /tenants       — Public: paginated tenant list (used by sign-up UIs).
GET    /tenants/{id}  — Admin, or a manager of that tenant.
PATCH  /tenants/{id}  — Admin: update name / address.
DELETE /tenants/{id}  — Admin: delete a tenant with no users left.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from auth_service.core.policy import Identity
from auth_service.dependencies import can_access, get_tenant_service
from auth_service.schemas.common import IdResponse, Page
from auth_service.schemas.tenant import TenantCreate, TenantRead, TenantUpdate
from auth_service.services.tenant_service import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Admin: create a tenant",
)
async def create_tenant(
    body: TenantCreate,
    admin: Annotated[Identity, Depends(can_access("tenants:create"))],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> IdResponse:
    tenant = await service.create_tenant(body)
    return IdResponse(id=tenant.id)


@router.get(
    "",
    response_model=Page[TenantRead],
    summary="List tenants",
)
async def list_tenants(
    service: Annotated[TenantService, Depends(get_tenant_service)],
    current_page: Annotated[int, Query(alias="currentPage", ge=1)] = 1,
    per_page: Annotated[int, Query(alias="perPage", ge=1, le=100)] = 6,
    q: Annotated[Optional[str], Query(max_length=100)] = None,
) -> Page[TenantRead]:
    tenants, total = await service.list_tenants(page=current_page, per_page=per_page, q=q)
    return Page[TenantRead](
        current_page=current_page,
        per_page=per_page,
        total=total,
        data=[TenantRead.model_validate(t) for t in tenants],
    )


@router.get(
    "/{tenant_id}",
    response_model=TenantRead,
    summary="Fetch a tenant (admin, or manager of the tenant)",
)
async def get_tenant(
    tenant_id: int,
    caller: Annotated[Identity, Depends(can_access("tenants:read"))],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantRead:
    tenant = await service.get_tenant(tenant_id)
    return TenantRead.model_validate(tenant)


@router.patch(
    "/{tenant_id}",
    response_model=IdResponse,
    summary="Admin: update a tenant",
)
async def update_tenant(
    tenant_id: int,
    body: TenantUpdate,
    admin: Annotated[Identity, Depends(can_access("tenants:update"))],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> IdResponse:
    tenant = await service.update_tenant(tenant_id, body)
    return IdResponse(id=tenant.id)


@router.delete(
    "/{tenant_id}",
    response_model=IdResponse,
    summary="Admin: delete a tenant",
)
async def delete_tenant(
    tenant_id: int,
    admin: Annotated[Identity, Depends(can_access("tenants:delete"))],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> IdResponse:
    await service.delete_tenant(tenant_id)
    return IdResponse(id=tenant_id)
