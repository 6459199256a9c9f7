"""
create_tables.py
----------------
One-shot script to create all database tables.
Use this for quick setup. For production migrations, use Alembic instead.

Usage:
    python create_tables.py
"""

import asyncio

from auth_service.core.config import get_settings
from auth_service.db.session import build_engine
from auth_service.models import Base  # Imports all models so metadata is populated


async def create_all_tables() -> None:
    engine = build_engine(get_settings().DATABASE_URL, echo=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    print("All tables created successfully.")


if __name__ == "__main__":
    asyncio.run(create_all_tables())
