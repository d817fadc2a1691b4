"""Shared fixtures: a temp project with one artifact, a started store, an API client."""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from reviewgate.config import Settings
from reviewgate.main import create_app
from reviewgate.services.approval_store import ApprovalStore

DESIGN = "A\nB\nC\n"


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    (tmp_path / "design.md").write_text(DESIGN)
    return tmp_path


@pytest_asyncio.fixture
async def store(project_root: Path):
    store = ApprovalStore(project_root)
    await store.start()
    yield store
    await store.stop()


@pytest_asyncio.fixture
async def app(project_root: Path):
    app = create_app(Settings(project_root=project_root, database_url=""))
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
