"""FastAPI dependencies — the store and hub live on ``app.state``."""

from fastapi import Request, WebSocket

from reviewgate.services.approval_store import ApprovalStore
from reviewgate.services.realtime_hub import RealtimeHub


def get_store(request: Request) -> ApprovalStore:
    return request.app.state.store


def get_hub(websocket: WebSocket) -> RealtimeHub:
    return websocket.app.state.hub
