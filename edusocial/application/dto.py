from dataclasses import dataclass, field
from datetime import datetime
from math import ceil

from ..domain.entities import Assignment, User


@dataclass
class AuthResult:
    user: User
    token: str


@dataclass
class AssignmentQuery:
    page: int = 1
    limit: int = 10
    status: str = "all"
    sort_by: str = "dueDate"
    sort_order: str = "asc"


@dataclass
class AssignmentPage:
    items: list[Assignment]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass
class AssignmentUpdate:
    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None

    def changes(self) -> dict:
        return {k: v for k, v in vars(self).items() if v is not None}


@dataclass
class AssignmentStats:
    total_assignments: int = 0
    upcoming_assignments: int = 0
    overdue_assignments: int = 0
    total_submissions: int = 0
    avg_submissions_per_assignment: float = 0.0


@dataclass
class UserStats:
    total: int = 0
    admins: int = 0
    professors: int = 0
    students: int = 0


@dataclass
class FileData:
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class StoredFile:
    url: str
    public_id: str
    original_name: str
    format: str
    size: int
    uploaded_at: datetime
