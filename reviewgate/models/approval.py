"""Approval ORM models — review requests and the comments attached to them."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviewgate.database import Base


class Approval(Base):
    __tablename__ = "approvals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(256))
    file_path: Mapped[str] = mapped_column(String(512))  # relative to project root
    type: Mapped[str] = mapped_column(String(16))  # document|action
    category: Mapped[str] = mapped_column(String(32))  # spec|steering
    category_name: Mapped[str] = mapped_column(String(128))
    status: Mapped[str] = mapped_column(
        String(32), default="pending"
    )  # pending|approved|rejected|needs-revision
    response: Mapped[str | None] = mapped_column(Text, nullable=True)
    annotations: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    next_snapshot_version: Mapped[int] = mapped_column(Integer, default=1)

    comments: Mapped[list["ApprovalComment"]] = relationship(
        back_populates="approval",
        cascade="all, delete-orphan",
        order_by="ApprovalComment.id",
        lazy="selectin",
    )


class ApprovalComment(Base):
    __tablename__ = "approval_comments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    approval_id: Mapped[str] = mapped_column(ForeignKey("approvals.id", ondelete="CASCADE"))
    type: Mapped[str] = mapped_column(String(16))  # selection|general
    selected_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    comment: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)

    approval: Mapped[Approval] = relationship(back_populates="comments")
