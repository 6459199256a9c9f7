"""
stores/user_store.py
--------------------
Persistence for User rows. Email uniqueness is enforced by the unique
index on users.email; callers check first to report a clean conflict.
"""

from typing import List, Optional, Tuple

from sqlalchemy import or_, select

from auth_service.models.user import User
from auth_service.stores.base import BaseStore


class UserStore(BaseStore[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        role: str,
        tenant_id: Optional[int] = None,
    ) -> User:
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
            role=role,
            tenant_id=tenant_id,
        )
        return await self.add(user)

    async def list(
        self,
        *,
        page: int = 1,
        per_page: int = 6,
        q: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        stmt = select(User)
        if q:
            term = f"%{q.lower()}%"
            stmt = stmt.where(
                or_(
                    User.first_name.ilike(term),
                    User.last_name.ilike(term),
                    User.email.ilike(term),
                )
            )
        if role:
            stmt = stmt.where(User.role == role)
        return await self.paginate(stmt.order_by(User.id), page=page, per_page=per_page)
