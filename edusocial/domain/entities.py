from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from .errors import ValidationError

DUE_DATE_GRACE = timedelta(hours=24)


def utcnow() -> datetime:
    """Naive UTC timestamp; all stored datetimes are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_isoformat(value: datetime) -> str:
    """ISO string with an explicit UTC offset for a naive UTC datetime."""
    return to_naive_utc(value).replace(tzinfo=timezone.utc).isoformat()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Role(str, Enum):
    ADMIN = "admin"
    PROFESSOR = "professor"
    STUDENT = "student"


@dataclass(frozen=True)
class User:
    id: int | None
    name: str
    email: str
    role: Role = Role.STUDENT
    created_at: datetime | None = None


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as carried in the bearer token."""

    id: int
    name: str
    email: str
    role: Role


@dataclass(frozen=True)
class UserRef:
    id: int
    name: str
    email: str


@dataclass(frozen=True)
class Submission:
    id: int | None
    student: UserRef
    content: str
    file_url: str | None
    submitted_at: datetime


@dataclass
class Assignment:
    id: int | None
    title: str
    description: str
    due_date: datetime
    created_by: UserRef
    submissions: list[Submission] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_overdue(self, now: datetime | None = None) -> bool:
        return (now or utcnow()) > self.due_date

    def submission_count(self) -> int:
        return len(self.submissions)

    def submission_by_student(self, student_id: int) -> Submission | None:
        for submission in self.submissions:
            if submission.student.id == student_id:
                return submission
        return None

    def has_student_submitted(self, student_id: int) -> bool:
        return self.submission_by_student(student_id) is not None


def validate_due_date(due_date: datetime, now: datetime | None = None) -> datetime:
    """Reject due dates more than 24 hours in the past; returns naive UTC."""
    due_date = to_naive_utc(due_date)
    if due_date <= (now or utcnow()) - DUE_DATE_GRACE:
        raise ValidationError("Due date must be in the future")
    return due_date
