"""Approval store — durable approval requests scoped to one project root.

All writes to a given approval id go through a per-id ``asyncio.Lock`` and a
single database transaction, so a comment, a decision and a delete can never
interleave. Reads take no lock.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
import weakref
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from reviewgate.database import init_db, make_engine, make_sessionmaker
from reviewgate.errors import NotFound, ValidationError
from reviewgate.models.approval import Approval, ApprovalComment
from reviewgate.models.snapshot import ApprovalSnapshot
from reviewgate.schemas.approval import AnchoredComment, CommentCreate
from reviewgate.schemas.diff import DiffResult
from reviewgate.services import diff_service, snapshot_service, state_machine
from reviewgate.utils.artifacts import read_artifact
from reviewgate.utils.paths import safe_join, validate_project_path, workflow_root

logger = logging.getLogger(__name__)

APPROVAL_TYPES = ("document", "action")


@dataclass(frozen=True)
class ApprovalEvent:
    kind: Literal["created", "decided", "commented", "snapshot", "deleted"]
    approval_id: str


Listener = Callable[[ApprovalEvent], Awaitable[None]]


def anchor_comments(content: str, comments: list[ApprovalComment]) -> list[AnchoredComment]:
    """Match selection comments against *content* by literal text.

    A selection whose text no longer appears verbatim is orphaned and shown
    as a general comment.
    """
    anchored = []
    for c in comments:
        found = c.type == "selection" and bool(c.selected_text) and c.selected_text in content
        anchored.append(
            AnchoredComment(
                type=c.type,
                selected_text=c.selected_text,
                comment=c.comment,
                created_at=c.created_at,
                anchored=found,
                display_type="selection" if found else "general",
            )
        )
    return anchored


class ApprovalStore:
    """Single source of truth for approvals of one project."""

    def __init__(
        self,
        project_root: str | Path,
        database_url: str | None = None,
        diff_context_lines: int = 3,
        echo: bool = False,
    ):
        self.project_root = Path(project_root)
        self.database_url = database_url
        self.diff_context_lines = diff_context_lines
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None
        # Entries disappear once no operation holds or awaits the lock
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._listeners: list[Listener] = []

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        self.project_root = validate_project_path(self.project_root)
        url = self.database_url
        if not url:
            db_dir = workflow_root(self.project_root)
            db_dir.mkdir(parents=True, exist_ok=True)
            url = f"sqlite+aiosqlite:///{db_dir / 'approvals.db'}"
        self._engine = make_engine(url, echo=self.echo)
        self._sessions = make_sessionmaker(self._engine)
        await init_db(self._engine)
        logger.info("Approval store started for %s", self.project_root)

    async def stop(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Approval store stopped for %s", self.project_root)

    async def __aenter__(self) -> "ApprovalStore":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    def session(self) -> AsyncSession:
        if self._sessions is None:
            raise RuntimeError("ApprovalStore is not started")
        return self._sessions()

    # ── Change notification ──────────────────────────────────────────

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _emit(self, kind: str, approval_id: str) -> None:
        event = ApprovalEvent(kind=kind, approval_id=approval_id)
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception:
                # The mutation is already committed; a broken observer must not undo it
                logger.exception("Approval listener failed for %s event on %s", kind, approval_id)

    def _lock_for(self, approval_id: str) -> asyncio.Lock:
        lock = self._locks.get(approval_id)
        if lock is None:
            lock = self._locks[approval_id] = asyncio.Lock()
        return lock

    # ── Reads ────────────────────────────────────────────────────────

    async def get(self, approval_id: str) -> Approval:
        async with self.session() as db:
            return await self._load(db, approval_id)

    async def list_all(self, status: str | None = None) -> list[Approval]:
        stmt = select(Approval).order_by(Approval.created_at.desc(), Approval.id)
        if status:
            stmt = stmt.where(Approval.status == status)
        async with self.session() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def list_versions(self, approval_id: str) -> list[ApprovalSnapshot]:
        async with self.session() as db:
            await self._load(db, approval_id)
            return await snapshot_service.list_versions(db, approval_id)

    async def get_version(self, approval_id: str, version: int) -> ApprovalSnapshot:
        async with self.session() as db:
            await self._load(db, approval_id)
            return await snapshot_service.get_version(db, approval_id, version)

    async def read_content(self, approval_id: str) -> tuple[Approval, str, list[AnchoredComment]]:
        """Live artifact content plus its comments anchored against that content."""
        approval = await self.get(approval_id)
        content = read_artifact(safe_join(self.project_root, approval.file_path)).content
        return approval, content, anchor_comments(content, approval.comments)

    async def diff(
        self, approval_id: str, from_version: int, to_version: int | Literal["current"] = "current"
    ) -> DiffResult:
        """Diff a stored version against another version or the live artifact."""
        async with self.session() as db:
            approval = await self._load(db, approval_id)
            old = await snapshot_service.get_version(db, approval_id, from_version)
            if to_version == "current":
                path = safe_join(self.project_root, approval.file_path)
                new_content = read_artifact(path).content
            else:
                new_content = (await snapshot_service.get_version(db, approval_id, to_version)).content
        return diff_service.diff(old.content, new_content, context=self.diff_context_lines)

    # ── Mutations ────────────────────────────────────────────────────

    async def create(
        self,
        title: str,
        file_path: str,
        category: str,
        category_name: str,
        type: str = "document",
    ) -> str:
        """Persist a pending approval and its initial snapshot; returns the new id."""
        missing = [
            name
            for name, value in (
                ("title", title),
                ("file_path", file_path),
                ("category", category),
                ("category_name", category_name),
                ("type", type),
            )
            if not value
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if type not in APPROVAL_TYPES:
            raise ValidationError(f"Invalid type '{type}'. Must be one of: {', '.join(APPROVAL_TYPES)}")
        # Reject traversal before anything is written
        safe_join(self.project_root, file_path)

        approval_id = f"approval_{uuid.uuid4().hex}"
        async with self._lock_for(approval_id):
            async with self.session() as db:
                approval = Approval(
                    id=approval_id,
                    title=title,
                    file_path=file_path,
                    type=type,
                    category=category,
                    category_name=category_name,
                    status=state_machine.PENDING,
                    created_at=datetime.now(),
                    next_snapshot_version=1,
                    comments=[],
                )
                db.add(approval)
                await snapshot_service.capture(db, self.project_root, approval, "initial")
                await db.commit()
            logger.info("Created approval %s for %s (%s)", approval_id, file_path, title)
            await self._emit("created", approval_id)
        return approval_id

    async def record_decision(
        self,
        approval_id: str,
        status: str,
        response: str | None = None,
        annotations: str | None = None,
        comments: list[CommentCreate] | None = None,
    ) -> Approval:
        async with self._lock_for(approval_id):
            async with self.session() as db:
                approval = await self._load(db, approval_id)
                new_status, trigger = state_machine.transition(approval.status, status)

                if comments:
                    content = self._live_content(approval)
                    for comment in comments:
                        approval.comments.append(self._new_comment(comment, content))
                    await db.flush()

                approval.status = new_status
                approval.responded_at = datetime.now()
                approval.response = response
                approval.annotations = annotations
                await snapshot_service.capture(db, self.project_root, approval, trigger)
                await db.commit()
            logger.info("Approval %s decided: %s", approval_id, new_status)
            await self._emit("decided", approval_id)
        return approval

    async def append_comment(self, approval_id: str, comment: CommentCreate) -> None:
        async with self._lock_for(approval_id):
            async with self.session() as db:
                approval = await self._load(db, approval_id)
                state_machine.ensure_commentable(approval.status)
                content = self._live_content(approval) if comment.type == "selection" else ""
                approval.comments.append(self._new_comment(comment, content))
                await db.commit()
            await self._emit("commented", approval_id)

    async def capture_snapshot(self, approval_id: str) -> ApprovalSnapshot:
        """Manual checkpoint, no status change."""
        async with self._lock_for(approval_id):
            async with self.session() as db:
                approval = await self._load(db, approval_id)
                snapshot = await snapshot_service.capture(db, self.project_root, approval, "manual")
                await db.commit()
            await self._emit("snapshot", approval_id)
        return snapshot

    async def delete(self, approval_id: str) -> bool:
        """Remove an approved request together with its snapshot history."""
        async with self._lock_for(approval_id):
            async with self.session() as db:
                approval = await self._load(db, approval_id)
                state_machine.ensure_deletable(approval.status)
                await snapshot_service.delete_history(db, approval_id)
                await db.delete(approval)
                await db.commit()
            logger.info("Deleted approval %s", approval_id)
            await self._emit("deleted", approval_id)
        return True

    # ── Helpers ──────────────────────────────────────────────────────

    @staticmethod
    async def _load(db: AsyncSession, approval_id: str) -> Approval:
        approval = await db.get(Approval, approval_id)
        if approval is None:
            raise NotFound(f"Approval request not found: {approval_id}")
        return approval

    def _live_content(self, approval: Approval) -> str:
        return read_artifact(safe_join(self.project_root, approval.file_path)).content

    @staticmethod
    def _new_comment(data: CommentCreate, content: str) -> ApprovalComment:
        if data.type == "selection":
            if not data.selected_text or data.selected_text not in content:
                raise ValidationError("Selected text does not appear in the current artifact content")
        return ApprovalComment(
            type=data.type,
            selected_text=data.selected_text if data.type == "selection" else None,
            comment=data.comment,
            created_at=datetime.now(),
        )
