from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..domain.entities import utcnow
from .db import Base


class UserORM(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default="student", index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"UserORM(id={self.id!r}, email={self.email!r}, role={self.role!r})"


class AssignmentORM(Base):
    __tablename__ = "assignments"
    __table_args__ = (
        Index("ix_assignments_creator_due", "created_by_id", "due_date"),
        Index("ix_assignments_due_created", "due_date", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    created_by: Mapped["UserORM"] = relationship("UserORM", lazy="joined")
    submissions: Mapped[list["SubmissionORM"]] = relationship(
        "SubmissionORM",
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="SubmissionORM.id",
    )

    def __repr__(self) -> str:
        return f"AssignmentORM(id={self.id!r}, title={self.title!r})"


class SubmissionORM(Base):
    __tablename__ = "submissions"
    __table_args__ = (UniqueConstraint("assignment_id", "student_id", name="uq_assignment_student"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    file_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    assignment: Mapped["AssignmentORM"] = relationship("AssignmentORM", back_populates="submissions")
    student: Mapped["UserORM"] = relationship("UserORM", lazy="joined")

    def __repr__(self) -> str:
        return f"SubmissionORM(id={self.id!r}, assignment_id={self.assignment_id!r}, student_id={self.student_id!r})"


__all__ = [
    "UserORM",
    "AssignmentORM",
    "SubmissionORM",
]
