"""Realtime hub tests."""

import asyncio

import pytest

from reviewgate.services.approval_store import ApprovalStore
from reviewgate.services.realtime_hub import RealtimeHub, topics_from_query


@pytest.mark.asyncio
async def test_mutations_publish_full_state(store: ApprovalStore):
    hub = RealtimeHub(store)
    hub.start()
    sub = hub.subscribe("approvals")

    approval_id = await store.create("Design", "design.md", "spec", "payments")
    message = await sub.get()
    assert message["type"] == "approval-update"
    assert [a["id"] for a in message["data"]] == [approval_id]
    assert message["data"][0]["status"] == "pending"

    await store.record_decision(approval_id, "approved")
    message = await sub.get()
    assert message["data"][0]["status"] == "approved"

    # Pushed data equals what a polling client reads
    assert message["data"] == await hub.approvals_state()

    await store.delete(approval_id)
    assert (await sub.get())["data"] == []
    hub.stop()


@pytest.mark.asyncio
async def test_concurrent_creates_end_on_latest_state(store: ApprovalStore, project_root):
    (project_root / "tasks.md").write_text("- [ ] one\n")
    hub = RealtimeHub(store)
    hub.start()
    sub = hub.subscribe("approvals")

    # The first state read stalls after reading, so an unserialized second
    # publish would overtake it and the stale list would arrive last
    read_all = store.list_all
    reads = 0

    async def stalling_list_all(status=None):
        nonlocal reads
        reads += 1
        result = await read_all(status)
        if reads == 1:
            await asyncio.sleep(0.2)
        return result

    store.list_all = stalling_list_all
    await asyncio.gather(
        store.create("Design", "design.md", "spec", "payments"),
        store.create("Tasks", "tasks.md", "spec", "payments"),
    )

    messages = []
    while not sub.queue.empty():
        messages.append(sub.queue.get_nowait())
    assert len(messages) == 2
    assert len(messages[-1]["data"]) == 2
    assert messages[-1]["data"] == await hub.approvals_state()
    hub.stop()


@pytest.mark.asyncio
async def test_topics_filter_and_unsubscribe(store: ApprovalStore):
    hub = RealtimeHub(store)
    approvals_sub = hub.subscribe("approvals")
    specs_sub = hub.subscribe("specs")

    assert hub.publish("specs", "spec-update", {"specs": []}) == 1
    assert specs_sub.queue.qsize() == 1
    assert approvals_sub.queue.empty()

    hub.unsubscribe(specs_sub)
    assert hub.publish("specs", "spec-update", {"specs": []}) == 0
    assert hub.subscriber_count == 1


@pytest.mark.asyncio
async def test_slow_subscriber_drops_oldest(store: ApprovalStore):
    hub = RealtimeHub(store, queue_size=2)
    sub = hub.subscribe("approvals")
    for n in range(5):
        hub.publish("approvals", "approval-update", n)

    assert sub.dropped == 3
    assert (await sub.get())["data"] == 3
    assert (await sub.get())["data"] == 4


@pytest.mark.asyncio
async def test_initial_message_carries_current_state(store: ApprovalStore):
    hub = RealtimeHub(store)
    approval_id = await store.create("Design", "design.md", "spec", "payments")
    message = await hub.initial_message(hub.subscribe())
    assert message["type"] == "initial"
    assert [a["id"] for a in message["data"]["approvals"]] == [approval_id]


def test_topics_from_query():
    assert topics_from_query(None) == {"approvals"}
    assert topics_from_query(" approvals , steering,") == {"approvals", "steering"}
