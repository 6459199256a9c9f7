"""
stores/base.py
--------------
Generic persistence helpers shared by the concrete stores.

A store wraps one AsyncSession handed in by the caller (normally the
request-scoped session from db.session.get_db). Stores flush as they go;
the service that owns a write flow calls commit() once, before the route
builds its response, so a failed commit reaches the client as a 500.
"""

from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.core.errors import InternalError
from auth_service.core.logging import get_logger
from auth_service.db.base import Base

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseStore(Generic[ModelType]):
    model: Type[ModelType]

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, id: int) -> Optional[ModelType]:
        return await self.db.get(self.model, id)

    async def add(self, obj: ModelType) -> ModelType:
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType, fields: Dict[str, Any]) -> ModelType:
        for field, value in fields.items():
            setattr(obj, field, value)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()

    async def commit(self) -> None:
        """Commit the session shared by every store of the request."""
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Commit failed", error=str(exc))
            raise InternalError("Failed to store data in the database") from exc

    async def paginate(
        self, stmt: Select, *, page: int, per_page: int
    ) -> Tuple[List[ModelType], int]:
        """Return one page of `stmt` and the total row count it matches."""
        total = await self.db.scalar(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        )
        result = await self.db.execute(
            stmt.offset((page - 1) * per_page).limit(per_page)
        )
        return list(result.scalars().all()), int(total or 0)
