"""Shared pytest fixtures for the Splito backend tests."""

import asyncio
import os
from pathlib import Path

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from app.core.dependencies import get_db
from app.db.session import Base
from app.main import app


async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def client(tmp_path: Path):
    """API client backed by a fresh SQLite database in tmp_path."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'splito.db'}",
        poolclass=NullPool,
    )
    asyncio.run(_create_tables(engine))

    test_session = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with test_session() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        asyncio.run(engine.dispose())


@pytest.fixture
def make_group(client: TestClient):
    """Create a group owned by the first user and add the rest as members."""

    def _make(*user_ids: int, name: str = "Goa trip") -> int:
        res = client.post("/api/v1/groups/", json={"name": name, "created_by": user_ids[0]})
        assert res.status_code == 201, res.text
        group_id = res.json()["id"]
        for uid in user_ids[1:]:
            res = client.post(f"/api/v1/groups/{group_id}/members", json={"user_id": uid})
            assert res.status_code == 201, res.text
        return group_id

    return _make
