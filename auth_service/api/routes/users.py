"""
api/routes/users.py
-------------------
Admin-only endpoints for user management.

POST   /users       — Admin creates a user with an explicit role / tenant.
PATCH  /users/{id}  — Update profile fields, role or tenant.
GET    /users       — Paginated, filterable list.
GET    /users/{id}  — Fetch one user.
DELETE /users/{id}  — Remove a user (their refresh tokens go with them).
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from auth_service.core.policy import Identity
from auth_service.dependencies import can_access, get_user_service
from auth_service.models.user import Role
from auth_service.schemas.common import IdResponse, Page
from auth_service.schemas.user import UserCreate, UserRead, UserUpdate
from auth_service.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Admin: create a user",
)
async def create_user(
    body: UserCreate,
    admin: Annotated[Identity, Depends(can_access("users:create"))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> IdResponse:
    user = await service.create_user(body)
    return IdResponse(id=user.id)


@router.patch(
    "/{user_id}",
    response_model=IdResponse,
    summary="Admin: update a user",
)
async def update_user(
    user_id: int,
    body: UserUpdate,
    admin: Annotated[Identity, Depends(can_access("users:update"))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> IdResponse:
    user = await service.update_user(user_id, body)
    return IdResponse(id=user.id)


@router.get(
    "",
    response_model=Page[UserRead],
    summary="Admin: list users",
)
async def list_users(
    admin: Annotated[Identity, Depends(can_access("users:list"))],
    service: Annotated[UserService, Depends(get_user_service)],
    current_page: Annotated[int, Query(alias="currentPage", ge=1)] = 1,
    per_page: Annotated[int, Query(alias="perPage", ge=1, le=100)] = 6,
    q: Annotated[Optional[str], Query(max_length=100)] = None,
    role: Optional[Role] = None,
) -> Page[UserRead]:
    users, total = await service.list_users(
        page=current_page, per_page=per_page, q=q, role=role
    )
    return Page[UserRead](
        current_page=current_page,
        per_page=per_page,
        total=total,
        data=[UserRead.model_validate(u) for u in users],
    )


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Admin: fetch a user",
)
async def get_user(
    user_id: int,
    admin: Annotated[Identity, Depends(can_access("users:read"))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserRead:
    user = await service.get_user(user_id)
    return UserRead.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=IdResponse,
    summary="Admin: delete a user",
)
async def delete_user(
    user_id: int,
    admin: Annotated[Identity, Depends(can_access("users:delete"))],
    service: Annotated[UserService, Depends(get_user_service)],
) -> IdResponse:
    await service.delete_user(user_id)
    return IdResponse(id=user_id)
