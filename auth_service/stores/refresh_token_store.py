"""
stores/refresh_token_store.py
-----------------------------
Persistence for RefreshToken rows, the revocation state behind refresh
tokens.
"""

from datetime import datetime

from sqlalchemy import delete

from auth_service.models.refresh_token import RefreshToken
from auth_service.stores.base import BaseStore


class RefreshTokenStore(BaseStore[RefreshToken]):
    model = RefreshToken

    async def create(self, *, user_id: int, expires_at: datetime) -> RefreshToken:
        return await self.add(RefreshToken(user_id=user_id, expires_at=expires_at))

    async def delete_by_id(self, id: int) -> int:
        """Delete the record if present; returns the number of rows removed."""
        result = await self.db.execute(delete(RefreshToken).where(RefreshToken.id == id))
        return result.rowcount or 0
