"""Approval endpoints — request, decide, comment, snapshot, diff, clean up."""

from fastapi import APIRouter, Depends, Query

from reviewgate.dependencies import get_store
from reviewgate.errors import ValidationError
from reviewgate.schemas.approval import (
    ApprovalContentResponse,
    ApprovalCreate,
    ApprovalCreated,
    ApprovalDecision,
    ApprovalResponse,
    ApprovalStatusReport,
    CommentCreate,
)
from reviewgate.schemas.diff import DiffResult
from reviewgate.schemas.snapshot import (
    SnapshotCaptureResponse,
    SnapshotResponse,
    SnapshotSummary,
)
from reviewgate.services import state_machine
from reviewgate.services.approval_store import ApprovalStore
from reviewgate.services.status_report import build_status_report

router = APIRouter()


@router.get("/", response_model=list[ApprovalResponse])
async def list_approvals(status: str | None = None, store: ApprovalStore = Depends(get_store)):
    return await store.list_all(status=status)


@router.post("/", response_model=ApprovalCreated, status_code=201)
async def create_approval(data: ApprovalCreate, store: ApprovalStore = Depends(get_store)):
    approval_id = await store.create(
        title=data.title,
        file_path=data.file_path,
        category=data.category,
        category_name=data.category_name,
        type=data.type,
    )
    return ApprovalCreated(
        approval_id=approval_id, title=data.title, file_path=data.file_path, type=data.type
    )


@router.get("/{approval_id}", response_model=ApprovalResponse)
async def get_approval(approval_id: str, store: ApprovalStore = Depends(get_store)):
    return await store.get(approval_id)


@router.get("/{approval_id}/status", response_model=ApprovalStatusReport)
async def get_approval_status(approval_id: str, store: ApprovalStore = Depends(get_store)):
    """Polling endpoint for the automation client."""
    return build_status_report(await store.get(approval_id))


@router.get("/{approval_id}/content", response_model=ApprovalContentResponse)
async def get_approval_content(approval_id: str, store: ApprovalStore = Depends(get_store)):
    approval, content, comments = await store.read_content(approval_id)
    return ApprovalContentResponse(
        approval_id=approval.id, file_path=approval.file_path, content=content, comments=comments
    )


async def _decide(store: ApprovalStore, approval_id: str, outcome: str, body: ApprovalDecision):
    return await store.record_decision(
        approval_id,
        outcome,
        response=body.response,
        annotations=body.annotations,
        comments=body.comments,
    )


@router.post("/{approval_id}/approve", response_model=ApprovalResponse)
async def approve(
    approval_id: str, body: ApprovalDecision | None = None, store: ApprovalStore = Depends(get_store)
):
    return await _decide(store, approval_id, state_machine.APPROVED, body or ApprovalDecision())


@router.post("/{approval_id}/reject", response_model=ApprovalResponse)
async def reject(
    approval_id: str, body: ApprovalDecision | None = None, store: ApprovalStore = Depends(get_store)
):
    return await _decide(store, approval_id, state_machine.REJECTED, body or ApprovalDecision())


@router.post("/{approval_id}/needs-revision", response_model=ApprovalResponse)
async def request_revision(
    approval_id: str, body: ApprovalDecision | None = None, store: ApprovalStore = Depends(get_store)
):
    return await _decide(store, approval_id, state_machine.NEEDS_REVISION, body or ApprovalDecision())


@router.post("/{approval_id}/comments", response_model=ApprovalResponse, status_code=201)
async def add_comment(
    approval_id: str, body: CommentCreate, store: ApprovalStore = Depends(get_store)
):
    await store.append_comment(approval_id, body)
    return await store.get(approval_id)


@router.delete("/{approval_id}", status_code=204)
async def delete_approval(approval_id: str, store: ApprovalStore = Depends(get_store)):
    await store.delete(approval_id)


# ── Snapshots & diffs ───────────────────────────────────────────────


@router.get("/{approval_id}/snapshots", response_model=list[SnapshotSummary])
async def list_snapshots(approval_id: str, store: ApprovalStore = Depends(get_store)):
    return await store.list_versions(approval_id)


@router.get("/{approval_id}/snapshots/{version}", response_model=SnapshotResponse)
async def get_snapshot(approval_id: str, version: int, store: ApprovalStore = Depends(get_store)):
    return await store.get_version(approval_id, version)


@router.post("/{approval_id}/snapshot", response_model=SnapshotCaptureResponse, status_code=201)
async def capture_snapshot(approval_id: str, store: ApprovalStore = Depends(get_store)):
    snapshot = await store.capture_snapshot(approval_id)
    return SnapshotCaptureResponse(
        success=True,
        message=f"Snapshot v{snapshot.version} captured",
        snapshot=SnapshotSummary.model_validate(snapshot),
    )


@router.get("/{approval_id}/diff", response_model=DiffResult)
async def get_diff(
    approval_id: str,
    from_version: int = Query(..., alias="from", ge=1),
    to_version: str = Query("current", alias="to", description="Version number or \"current\""),
    store: ApprovalStore = Depends(get_store),
):
    if to_version == "current":
        return await store.diff(approval_id, from_version, "current")
    if not to_version.isdigit():
        raise ValidationError(f"Invalid target version: {to_version}")
    return await store.diff(approval_id, from_version, int(to_version))
