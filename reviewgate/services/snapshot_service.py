"""Snapshot service — immutable, versioned captures of reviewed artifacts."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from reviewgate.errors import NotFound
from reviewgate.models.approval import Approval, ApprovalComment
from reviewgate.models.snapshot import ApprovalSnapshot
from reviewgate.utils.artifacts import read_artifact
from reviewgate.utils.paths import safe_join

logger = logging.getLogger(__name__)

TRIGGERS = ("initial", "revision_requested", "approved", "manual")


def comment_to_dict(comment: ApprovalComment) -> dict:
    return {
        "type": comment.type,
        "selected_text": comment.selected_text,
        "comment": comment.comment,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
    }


async def capture(
    db: AsyncSession, project_root: Path, approval: Approval, trigger: str
) -> ApprovalSnapshot:
    """Append a new snapshot of *approval*'s artifact to its history.

    The artifact is read live from disk. A read failure raises ``IOFailure``
    and nothing is added, so the caller's transaction can be rolled back as a
    whole. The caller commits.
    """
    if trigger not in TRIGGERS:
        raise ValueError(f"Unknown snapshot trigger: {trigger}")

    artifact = read_artifact(safe_join(project_root, approval.file_path))

    version = approval.next_snapshot_version
    approval.next_snapshot_version = version + 1

    snapshot = ApprovalSnapshot(
        id=f"snapshot-{version:03d}",
        approval_id=approval.id,
        approval_title=approval.title,
        version=version,
        timestamp=datetime.now(),
        trigger=trigger,
        status=approval.status,
        content=artifact.content,
        size=artifact.size,
        lines=artifact.lines,
        last_modified=artifact.last_modified,
        comments=json.dumps([comment_to_dict(c) for c in approval.comments]),
        annotations=approval.annotations,
    )
    db.add(snapshot)
    logger.info(
        "Captured snapshot v%d of %s (trigger=%s, status=%s)",
        version, approval.id, trigger, approval.status,
    )
    return snapshot


async def list_versions(db: AsyncSession, approval_id: str) -> list[ApprovalSnapshot]:
    stmt = (
        select(ApprovalSnapshot)
        .where(ApprovalSnapshot.approval_id == approval_id)
        .order_by(ApprovalSnapshot.version)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_version(db: AsyncSession, approval_id: str, version: int) -> ApprovalSnapshot:
    stmt = select(ApprovalSnapshot).where(
        ApprovalSnapshot.approval_id == approval_id,
        ApprovalSnapshot.version == version,
    )
    snapshot = (await db.execute(stmt)).scalar_one_or_none()
    if snapshot is None:
        raise NotFound(f"Snapshot version {version} not found for approval {approval_id}")
    return snapshot


async def delete_history(db: AsyncSession, approval_id: str) -> None:
    """Remove every snapshot of an approval. Only used when the approval itself is deleted."""
    await db.execute(delete(ApprovalSnapshot).where(ApprovalSnapshot.approval_id == approval_id))
