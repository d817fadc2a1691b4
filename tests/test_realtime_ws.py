"""Realtime WebSocket endpoint tests (sync TestClient drives the lifespan itself)."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from reviewgate.config import Settings
from reviewgate.main import create_app
from reviewgate.routers.ws import stop_task


def test_ws_streams_initial_state_then_updates(project_root):
    app = create_app(Settings(project_root=project_root, database_url=""))
    with TestClient(app) as client:
        with client.websocket_connect("/ws?topics=approvals") as ws:
            initial = ws.receive_json()
            assert initial == {"type": "initial", "data": {"approvals": []}}

            resp = client.post(
                "/api/approvals/",
                json={
                    "title": "Design review",
                    "file_path": "design.md",
                    "type": "document",
                    "category": "spec",
                    "category_name": "payments",
                },
            )
            approval_id = resp.json()["approval_id"]

            update = ws.receive_json()
            assert update["type"] == "approval-update"
            assert [a["id"] for a in update["data"]] == [approval_id]

        # Subscription is released once the socket closes
        assert client.get("/health").json()["subscribers"] == 0


@pytest.mark.asyncio
async def test_stop_task_collects_sender_failure():
    async def failing_send():
        raise RuntimeError("socket gone")

    task = asyncio.create_task(failing_send())
    await asyncio.sleep(0)
    error = await stop_task(task)
    assert isinstance(error, RuntimeError)
    assert task.done()


@pytest.mark.asyncio
async def test_stop_task_waits_for_cancellation():
    async def endless_send():
        while True:
            await asyncio.sleep(1)

    task = asyncio.create_task(endless_send())
    await asyncio.sleep(0)
    assert await stop_task(task) is None
    assert task.cancelled()
    assert await stop_task(None) is None
