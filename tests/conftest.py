import os

# Settings are read at import time by main.py; point them somewhere harmless.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-do-not-use-in-production")

import httpx  # noqa: E402
import pytest  # noqa: E402
from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from auth_service.core.config import Settings  # noqa: E402
from auth_service.models import Base, Role  # noqa: E402
from auth_service.services.token_service import TokenService, utcnow  # noqa: E402
from auth_service.stores.tenant_store import TenantStore  # noqa: E402
from auth_service.stores.user_store import UserStore  # noqa: E402
from main import create_application  # noqa: E402

REFRESH_SECRET = "test-refresh-secret-do-not-use-in-production"


def _generate_private_key_pem() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture(scope="session")
def private_key_pem() -> str:
    return _generate_private_key_pem()


@pytest.fixture(scope="session")
def other_private_key_pem() -> str:
    return _generate_private_key_pem()


@pytest.fixture
def settings(private_key_pem) -> Settings:
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REFRESH_TOKEN_SECRET=REFRESH_SECRET,
        PRIVATE_KEY=private_key_pem,
        BCRYPT_ROUNDS=4,
        MAIN_DOMAIN="localhost",
    )


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}", poolclass=NullPool
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def app(settings, engine):
    return create_application(settings=settings, engine=engine)


@pytest.fixture
def session_factory(app):
    return app.state.session_factory


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_access_token(app):
    def _make(user_id: int, role: Role, clock=utcnow) -> str:
        service = TokenService(
            config=app.state.token_config,
            public_keys=app.state.public_keys,
            refresh_tokens=None,
            clock=clock,
        )
        return service.generate_access_token({"sub": str(user_id), "role": role.value})

    return _make


@pytest.fixture
def admin_headers(make_access_token):
    return {"Authorization": f"Bearer {make_access_token(1, Role.admin)}"}


@pytest.fixture
def create_tenant(session_factory):
    async def _create(name: str = "Acme Corp", address: str = "1 Main Street"):
        async with session_factory() as session:
            tenant = await TenantStore(session).create(name=name, address=address)
            await session.commit()
            return tenant

    return _create


@pytest.fixture
def create_user(app, session_factory):
    async def _create(
        email: str = "jane@mail.com",
        password: str = "secretpass",
        role: Role = Role.customer,
        tenant_id=None,
        first_name: str = "Jane",
        last_name: str = "Doe",
    ):
        async with session_factory() as session:
            user = await UserStore(session).create(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=app.state.password_hasher.hash(password),
                role=role.value,
                tenant_id=tenant_id,
            )
            await session.commit()
            return user

    return _create
