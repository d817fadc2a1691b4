"""Realtime WebSocket endpoint — streams full approval state to review sessions."""

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from reviewgate.dependencies import get_hub
from reviewgate.services.realtime_hub import RealtimeHub, topics_from_query

logger = logging.getLogger(__name__)

router = APIRouter()


async def stop_task(task: asyncio.Task | None) -> BaseException | None:
    """Cancel *task*, wait for it to finish and return whatever it raised.

    Cancellation itself is not reported; any other failure is logged.
    """
    if task is None:
        return None
    task.cancel()
    (result,) = await asyncio.gather(task, return_exceptions=True)
    if isinstance(result, asyncio.CancelledError) or not isinstance(result, BaseException):
        return None
    logger.warning("Realtime WS sender stopped with %r", result)
    return result


@router.websocket("/ws")
async def realtime_ws(ws: WebSocket, topics: str | None = None, hub: RealtimeHub = Depends(get_hub)):
    """Subscribe to approval changes.

    Query: ``?topics=approvals,specs`` (default ``approvals``).
    Server sends ``{"type": "initial", "data": {...}}`` first, then
    ``{"type": "approval-update", "data": [...]}`` after every change. A
    reconnecting client gets the full state again, nothing is replayed.
    """
    await ws.accept()
    sub = hub.subscribe(*topics_from_query(topics))
    sender = None
    try:
        await ws.send_json(await hub.initial_message(sub))

        async def pump() -> None:
            while True:
                await ws.send_json(await sub.get())

        sender = asyncio.create_task(pump())
        # Client messages are ignored; receiving detects the disconnect
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        logger.info("Realtime WS disconnected")
    except Exception:
        logger.exception("Realtime WS error")
    finally:
        await stop_task(sender)
        hub.unsubscribe(sub)
