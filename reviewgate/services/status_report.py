"""Status report — tells the polling automation client whether it may proceed.

Anything but ``approved`` is reported as blocked.
"""

from __future__ import annotations

from reviewgate.models.approval import Approval
from reviewgate.schemas.approval import ApprovalStatusReport, CommentResponse
from reviewgate.services import state_machine


def _next_steps(approval: Approval) -> list[str]:
    steps: list[str] = []
    status = approval.status

    if status == state_machine.PENDING:
        steps += [
            "BLOCKED - Do not proceed",
            "VERBAL APPROVAL NOT ACCEPTED - Use the review dashboard only",
            "Continue polling the approval status",
        ]
    elif status == state_machine.APPROVED:
        steps += ["APPROVED - Can proceed", "Delete the approval request before continuing"]
        if approval.response:
            steps.append(f"Response: {approval.response}")
    elif status == state_machine.REJECTED:
        steps += ["BLOCKED - REJECTED", "Do not proceed", "Review feedback and revise"]
        if approval.response:
            steps.append(f"Reason: {approval.response}")
        if approval.annotations:
            steps.append(f"Notes: {approval.annotations}")
    elif status == state_machine.NEEDS_REVISION:
        steps += [
            "BLOCKED - Do not proceed",
            "Update document with feedback",
            "Create NEW approval request",
        ]
        if approval.response:
            steps.append(f"Feedback: {approval.response}")
        if approval.annotations:
            steps.append(f"Notes: {approval.annotations}")
        if approval.comments:
            steps.append(f"{len(approval.comments)} comments for targeted fixes:")
            for index, comment in enumerate(approval.comments, start=1):
                if comment.type == "selection" and comment.selected_text:
                    steps.append(
                        f'  Comment {index} on "{comment.selected_text[:50]}...": {comment.comment}'
                    )
                else:
                    steps.append(f"  Comment {index} (general): {comment.comment}")
    return steps


def build_status_report(approval: Approval) -> ApprovalStatusReport:
    can_proceed = state_machine.can_proceed(approval.status)
    if approval.status == state_machine.PENDING:
        message = (
            f"BLOCKED: Status is {approval.status}. "
            "Verbal approval is NOT accepted. Use the review dashboard only."
        )
    else:
        message = f"Approval status: {approval.status}"

    return ApprovalStatusReport(
        approval_id=approval.id,
        title=approval.title,
        type=approval.type,
        status=approval.status,
        message=message,
        created_at=approval.created_at,
        responded_at=approval.responded_at,
        response=approval.response,
        annotations=approval.annotations,
        comments=[CommentResponse.model_validate(c) for c in approval.comments],
        is_completed=approval.status in (state_machine.APPROVED, state_machine.REJECTED),
        can_proceed=can_proceed,
        must_wait=not can_proceed,
        block_next=not can_proceed,
        next_steps=_next_steps(approval),
    )
