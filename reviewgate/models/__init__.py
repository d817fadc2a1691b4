from reviewgate.models.approval import Approval, ApprovalComment
from reviewgate.models.snapshot import ApprovalSnapshot

__all__ = ["Approval", "ApprovalComment", "ApprovalSnapshot"]
