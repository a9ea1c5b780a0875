import os
import sys
from pathlib import Path
import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# 테스트용 환경 변수 세팅 (app 모듈 임포트 전에 적용)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("CORS_ORIGINS", "*")

# sys.path에 backend 추가하여 'app' 패키지 검색 가능하게 함
repo_root = Path(__file__).resolve().parents[2]
backend_path = repo_root / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from app.main import app
from app.database import Base
from app.database import get_db as real_get_db


@pytest.fixture()
async def test_engine():
    # 메모리 SQLite로 빠른 테스트 (테스트마다 새 DB)
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture()
async def override_db(db):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


ALICE = {
    "username": "alice",
    "password": "Secret1",
    "verified_password": "Secret1",
    "name": "Alice Liddell",
    "email": "alice@example.com",
}

BOB = {
    "username": "bob-2",
    "password": "Hunter22",
    "verified_password": "Hunter22",
    "name": "Bob Builder",
    "email": "bob@example.com",
}


async def register_and_login(client, data):
    response = await client.post("/users/", json=data)
    assert response.status_code == 201, response.text
    user = response.json()
    response = await client.post(
        "/auth/login", data={"username": data["username"], "password": data["password"]}
    )
    assert response.status_code == 200, response.text
    tokens = response.json()
    return {
        "id": user["id"],
        "user": user,
        "tokens": tokens,
        "headers": {"Authorization": f"Bearer {tokens['access_token']}"},
    }


@pytest.fixture()
async def alice(client):
    return await register_and_login(client, dict(ALICE))


@pytest.fixture()
async def bob(client):
    return await register_and_login(client, dict(BOB))
