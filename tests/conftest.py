"""
Configuración de tests y fixtures compartidos.
"""

import os

# Settings requeridos antes de importar la app
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENCRYPTION_SECRET"] = "test-encryption-secret-for-cancelready"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"

from types import SimpleNamespace
from typing import Any, AsyncGenerator
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
import stripe
from httpx import AsyncClient, ASGITransport
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.adapters import ProcessorDispatcher
from app.db.models import Base, Cancellation, Vendor
from app.db.database import get_db
from app.dependencies import get_credential_cipher, get_processor_dispatcher
from app.utils.crypto import CredentialCipher


# Base de datos de testing en memoria (una sola conexión compartida)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}


class PaddleStub:
    """Simula la Paddle Billing API y registra las peticiones recibidas."""

    def __init__(self):
        self.calls: list[httpx.Request] = []
        self.status_code = 200
        self.body: Any = {"data": {"id": "sub_01paddle", "status": "canceled"}}
        self.error: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Crea un engine de testing para cada test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Crea una sesión de testing."""
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def cipher() -> CredentialCipher:
    """Cipher con el mismo secret que usa la app."""
    return get_credential_cipher()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return dict(ADMIN_HEADERS)


@pytest.fixture
def paddle_stub() -> PaddleStub:
    return PaddleStub()


@pytest.fixture
def stripe_cancel(monkeypatch) -> AsyncMock:
    """Reemplaza la llamada de cancelación del SDK de Stripe."""
    mock = AsyncMock(return_value=SimpleNamespace(id="sub_123", status="canceled"))
    monkeypatch.setattr(stripe.Subscription, "cancel_async", mock)
    return mock


@pytest_asyncio.fixture(scope="function")
async def client(
    test_session: AsyncSession,
    cipher: CredentialCipher,
    paddle_stub: PaddleStub,
) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP para tests de API."""

    async def override_get_db():
        yield test_session

    def override_get_dispatcher():
        return ProcessorDispatcher(
            cipher=cipher,
            timeout=5,
            paddle_api_url="https://paddle.test",
            http_transport=paddle_stub.transport,
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_processor_dispatcher] = override_get_dispatcher

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_vendor(test_session: AsyncSession, cipher: CredentialCipher):
    """Factory para insertar vendors con la credencial cifrada."""

    async def _make_vendor(
        vendor_key: str,
        processor: str,
        credential: Any = None,
        paddle_vendor_id: str | None = None,
        encrypt: bool = True,
    ) -> Vendor:
        if credential and encrypt:
            credential = cipher.encrypt(credential)

        vendor = Vendor(
            vendor_key=vendor_key,
            company_name=f"Company {vendor_key}",
            processor=processor,
            credential=credential,
            paddle_vendor_id=paddle_vendor_id,
        )
        test_session.add(vendor)
        await test_session.commit()
        return vendor

    return _make_vendor


@pytest.fixture
def cancellations(test_session: AsyncSession):
    """Retorna los registros de cancelación guardados."""

    async def _cancellations() -> list[Cancellation]:
        result = await test_session.execute(
            select(Cancellation).order_by(Cancellation.created_at)
        )
        return list(result.scalars().all())

    return _cancellations


@pytest.fixture
def count_cancellations(test_session: AsyncSession):
    async def _count() -> int:
        result = await test_session.execute(select(func.count()).select_from(Cancellation))
        return result.scalar_one()

    return _count
