import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from ...application.dto import AssignmentPage, AssignmentStats, StoredFile, UserStats
from ...domain.entities import Assignment, Role, Submission, User, utcnow

FILE_URL_PATTERN = re.compile(r"^https?://.+", re.IGNORECASE)


def as_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC; mark them so clients read them as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# --- Auth

class RegisterReq(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Role | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class LoginReq(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: UtcDateTime | None = None

    @classmethod
    def from_domain(cls, u: User) -> "UserOut":
        return cls(id=u.id, name=u.name, email=u.email, role=u.role, created_at=u.created_at)


class AuthResp(CamelModel):
    user: UserOut
    token: str


class UserResp(CamelModel):
    user: UserOut


class UserListResp(CamelModel):
    users: list[UserOut]


class RoleUpdateReq(CamelModel):
    role: Role


class UserStatsOut(CamelModel):
    total: int
    admins: int
    professors: int
    students: int


class UserStatsResp(CamelModel):
    stats: UserStatsOut

    @classmethod
    def build(cls, stats: UserStats) -> "UserStatsResp":
        return cls(stats=UserStatsOut(**asdict(stats)))


# --- Assignments

class AssignmentCreate(CamelModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=10000)
    due_date: datetime

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class AssignmentUpdateReq(CamelModel):
    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=10000)
    due_date: datetime | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class SubmitReq(CamelModel):
    content: str = Field(min_length=1, max_length=5000)
    file_url: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("file_url", mode="before")
    @classmethod
    def check_file_url(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if not isinstance(v, str) or not FILE_URL_PATTERN.match(v.strip()):
            raise ValueError("Invalid file URL format")
        return v.strip()


class UserRefOut(CamelModel):
    id: int
    name: str
    email: str


class SubmissionOut(CamelModel):
    id: int
    student_id: int
    student_name: str
    student_email: str
    content: str
    file_url: str | None = None
    submitted_at: UtcDateTime

    @classmethod
    def from_domain(cls, s: Submission) -> "SubmissionOut":
        return cls(
            id=s.id,
            student_id=s.student.id,
            student_name=s.student.name,
            student_email=s.student.email,
            content=s.content,
            file_url=s.file_url,
            submitted_at=s.submitted_at,
        )


class AssignmentOut(CamelModel):
    id: int
    title: str
    description: str
    due_date: UtcDateTime
    created_by: UserRefOut
    submission_count: int
    is_overdue: bool
    created_at: UtcDateTime | None = None
    updated_at: UtcDateTime | None = None

    @classmethod
    def fields_of(cls, a: Assignment, now: datetime) -> dict:
        return dict(
            id=a.id,
            title=a.title,
            description=a.description,
            due_date=a.due_date,
            created_by=UserRefOut(**asdict(a.created_by)),
            submission_count=a.submission_count(),
            is_overdue=a.is_overdue(now),
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    @classmethod
    def from_domain(cls, a: Assignment, now: datetime | None = None) -> "AssignmentOut":
        return cls(**cls.fields_of(a, now or utcnow()))


class AssignmentDetailOut(AssignmentOut):
    submissions: list[SubmissionOut] = []

    @classmethod
    def from_domain(cls, a: Assignment, now: datetime | None = None) -> "AssignmentDetailOut":
        return cls(
            **cls.fields_of(a, now or utcnow()),
            submissions=[SubmissionOut.from_domain(s) for s in a.submissions],
        )


class AssignmentResp(CamelModel):
    assignment: AssignmentOut


class AssignmentDetailResp(CamelModel):
    assignment: AssignmentDetailOut


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool


class AssignmentListResp(CamelModel):
    assignments: list[AssignmentOut]
    pagination: Pagination

    @classmethod
    def build(cls, page: AssignmentPage) -> "AssignmentListResp":
        now = utcnow()
        return cls(
            assignments=[AssignmentOut.from_domain(a, now) for a in page.items],
            pagination=Pagination(
                page=page.page,
                limit=page.limit,
                total=page.total,
                pages=page.pages,
                has_next=page.has_next,
                has_prev=page.has_prev,
            ),
        )


class SubmitResp(CamelModel):
    message: str = "Assignment submitted successfully"
    submitted_at: UtcDateTime


class MessageResp(CamelModel):
    message: str


class AssignmentStatsOut(CamelModel):
    total_assignments: int
    upcoming_assignments: int
    overdue_assignments: int
    total_submissions: int
    avg_submissions_per_assignment: float


class AssignmentStatsResp(CamelModel):
    stats: AssignmentStatsOut

    @classmethod
    def build(cls, stats: AssignmentStats) -> "AssignmentStatsResp":
        return cls(stats=AssignmentStatsOut(**asdict(stats)))


# --- Uploads

class StoredFileOut(CamelModel):
    url: str
    public_id: str
    original_name: str
    format: str
    size: int
    uploaded_at: UtcDateTime


class FileUploadResp(CamelModel):
    message: str = "File uploaded successfully"
    file: StoredFileOut

    @classmethod
    def build(cls, stored: StoredFile) -> "FileUploadResp":
        return cls(file=StoredFileOut(**asdict(stored)))


class ImageUploadResp(CamelModel):
    message: str = "Image uploaded successfully"
    image: StoredFileOut

    @classmethod
    def build(cls, stored: StoredFile) -> "ImageUploadResp":
        return cls(image=StoredFileOut(**asdict(stored)))
