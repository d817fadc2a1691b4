"""ApprovalSnapshot — immutable, versioned copy of a reviewed artifact."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from reviewgate.database import Base


class ApprovalSnapshot(Base):
    __tablename__ = "approval_snapshots"
    __table_args__ = (UniqueConstraint("approval_id", "version"),)

    pk: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32))  # snapshot-001, unique per approval
    approval_id: Mapped[str] = mapped_column(String(64), index=True)
    approval_title: Mapped[str] = mapped_column(String(256))
    version: Mapped[int] = mapped_column(Integer)
    timestamp: Mapped[datetime] = mapped_column(DateTime)
    trigger: Mapped[str] = mapped_column(String(32))  # initial|revision_requested|approved|manual
    status: Mapped[str] = mapped_column(String(32))  # approval status as of capture
    content: Mapped[str] = mapped_column(Text)
    size: Mapped[int] = mapped_column(Integer)
    lines: Mapped[int] = mapped_column(Integer)
    last_modified: Mapped[datetime] = mapped_column(DateTime)
    comments: Mapped[str] = mapped_column(Text, default="[]")  # JSON list
    annotations: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def file_stats(self) -> dict:
        return {"size": self.size, "lines": self.lines, "last_modified": self.last_modified}
