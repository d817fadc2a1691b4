"""Realtime hub — pushes full approval state to subscribed review sessions.

Every store mutation re-publishes the complete approval list instead of a
delta, so a subscriber that missed a message heals on the next one. Each
subscriber owns a bounded queue; publishing never waits on a subscriber and a
full queue drops its oldest message.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from reviewgate.schemas.approval import ApprovalResponse
from reviewgate.services.approval_store import ApprovalEvent, ApprovalStore

logger = logging.getLogger(__name__)

APPROVALS_TOPIC = "approvals"


class Subscription:
    """One session's interest in a set of topics."""

    def __init__(self, topics: set[str], maxsize: int):
        self.topics = topics
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def offer(self, message: dict[str, Any]) -> None:
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
        self.queue.put_nowait(message)

    async def get(self) -> dict[str, Any]:
        return await self.queue.get()


class RealtimeHub:
    def __init__(self, store: ApprovalStore, queue_size: int = 32):
        self.store = store
        self.queue_size = queue_size
        self._subscriptions: list[Subscription] = []
        # one read+publish at a time, so a later publish never carries older state
        self._publish_lock = asyncio.Lock()

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        self.store.add_listener(self._on_store_change)

    def stop(self) -> None:
        self.store.remove_listener(self._on_store_change)
        self._subscriptions.clear()

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, *topics: str) -> Subscription:
        sub = Subscription(set(topics) or {APPROVALS_TOPIC}, self.queue_size)
        self._subscriptions.append(sub)
        logger.info("Realtime subscriber added for %s (%d total)", sorted(sub.topics), len(self._subscriptions))
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)
            logger.info("Realtime subscriber removed (%d total)", len(self._subscriptions))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    # ── Publishing ───────────────────────────────────────────────────

    def publish(self, topic: str, event_type: str, data: Any) -> int:
        """Offer a message to every subscriber of *topic*; returns the number reached."""
        message = {"type": event_type, "data": data}
        reached = 0
        for sub in list(self._subscriptions):
            if topic not in sub.topics:
                continue
            before = sub.dropped
            sub.offer(message)
            if sub.dropped != before:
                logger.warning("Realtime subscriber lagging on '%s'; dropped oldest message", topic)
            reached += 1
        return reached

    async def approvals_state(self) -> list[dict[str, Any]]:
        approvals = await self.store.list_all()
        return [ApprovalResponse.model_validate(a).model_dump(mode="json") for a in approvals]

    async def publish_approvals(self) -> int:
        async with self._publish_lock:
            return self.publish(APPROVALS_TOPIC, "approval-update", await self.approvals_state())

    async def initial_message(self, sub: Subscription) -> dict[str, Any]:
        """Full current state for a freshly (re)connected session."""
        data: dict[str, Any] = {}
        if APPROVALS_TOPIC in sub.topics:
            data[APPROVALS_TOPIC] = await self.approvals_state()
        return {"type": "initial", "data": data}

    async def _on_store_change(self, event: ApprovalEvent) -> None:
        reached = await self.publish_approvals()
        logger.debug("Broadcast %s of %s to %d subscriber(s)", event.kind, event.approval_id, reached)


def topics_from_query(raw: str | None) -> set[str]:
    """Parse a comma separated ``topics`` query parameter."""
    topics = {t.strip() for t in (raw or "").split(",") if t.strip()}
    return topics or {APPROVALS_TOPIC}
