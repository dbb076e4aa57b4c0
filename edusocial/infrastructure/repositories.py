from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..application.dto import AssignmentQuery, AssignmentStats
from ..application.use_cases.manage_assignments import IAssignmentRepository
from ..application.use_cases.register_user import IUserRepository
from ..application.use_cases.submit_assignment import ALREADY_SUBMITTED
from ..domain.entities import Assignment, Role, Submission, User, UserRef
from ..domain.errors import AlreadySubmitted, Conflict, NotFound
from .models import AssignmentORM, SubmissionORM, UserORM

SORT_COLUMNS = {
    "dueDate": AssignmentORM.due_date,
    "createdAt": AssignmentORM.created_at,
    "title": AssignmentORM.title,
}


def to_domain(u: UserORM) -> User:
    return User(id=u.id, name=u.name, email=u.email, role=Role(u.role), created_at=u.created_at)


def to_ref(u: UserORM) -> UserRef:
    return UserRef(id=u.id, name=u.name, email=u.email)


def submission_to_domain(s: SubmissionORM) -> Submission:
    return Submission(
        id=s.id,
        student=to_ref(s.student),
        content=s.content,
        file_url=s.file_url,
        submitted_at=s.submitted_at,
    )


def assignment_to_domain(a: AssignmentORM) -> Assignment:
    return Assignment(
        id=a.id,
        title=a.title,
        description=a.description,
        due_date=a.due_date,
        created_by=to_ref(a.created_by),
        submissions=[submission_to_domain(s) for s in a.submissions],
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get_by_email(self, email: str) -> User | None:
        row = self.db.query(UserORM).filter(UserORM.email == email).first()
        return to_domain(row) if row else None

    def get_password_hash(self, email: str) -> tuple[User, str] | None:
        row = self.db.query(UserORM).filter(UserORM.email == email).first()
        return (to_domain(row), row.password_hash) if row else None

    def get_by_id(self, user_id: int) -> User | None:
        row = self.db.get(UserORM, user_id)
        return to_domain(row) if row else None

    def count(self) -> int:
        return self.db.query(func.count(UserORM.id)).scalar() or 0

    def create(self, name: str, email: str, password_hash: str, role: Role = Role.STUDENT) -> User:
        row = UserORM(name=name, email=email, password_hash=password_hash, role=role.value)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise Conflict("Email already registered") from exc
        self.db.refresh(row)
        return to_domain(row)

    def list_all(self) -> list[User]:
        rows = self.db.query(UserORM).order_by(UserORM.created_at.desc(), UserORM.id.desc()).all()
        return [to_domain(r) for r in rows]

    def update_role(self, user_id: int, role: Role) -> User:
        row = self.db.get(UserORM, user_id)
        if row is None:
            raise NotFound("User not found")
        row.role = role.value
        self.db.commit(); self.db.refresh(row)
        return to_domain(row)

    def count_by_role(self) -> dict[Role, int]:
        rows = self.db.query(UserORM.role, func.count(UserORM.id)).group_by(UserORM.role).all()
        return {Role(role): n for role, n in rows}


class AssignmentRepository(IAssignmentRepository):
    def __init__(self, db: Session): self.db = db

    def _load(self, assignment_id: int) -> AssignmentORM | None:
        stmt = (
            select(AssignmentORM)
            .options(selectinload(AssignmentORM.submissions))
            .where(AssignmentORM.id == assignment_id)
        )
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def create(self, title: str, description: str, due_date: datetime, creator_id: int) -> Assignment:
        row = AssignmentORM(title=title, description=description, due_date=due_date, created_by_id=creator_id)
        self.db.add(row); self.db.commit()
        return assignment_to_domain(self._load(row.id))

    def get(self, assignment_id: int) -> Assignment | None:
        row = self._load(assignment_id)
        return assignment_to_domain(row) if row else None

    def list(self, query: AssignmentQuery, creator_id: int | None, now: datetime) -> tuple[list[Assignment], int]:
        stmt = select(AssignmentORM)
        if creator_id is not None:
            stmt = stmt.where(AssignmentORM.created_by_id == creator_id)
        if query.status == "upcoming":
            stmt = stmt.where(AssignmentORM.due_date >= now)
        elif query.status == "overdue":
            stmt = stmt.where(AssignmentORM.due_date < now)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        column = SORT_COLUMNS.get(query.sort_by, AssignmentORM.due_date)
        ordering = column.desc() if query.sort_order == "desc" else column.asc()
        stmt = (
            stmt.options(selectinload(AssignmentORM.submissions))
            .order_by(ordering, AssignmentORM.id.asc())
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        rows = self.db.execute(stmt).unique().scalars().all()
        return [assignment_to_domain(r) for r in rows], total

    def update(self, assignment_id: int, changes: dict) -> Assignment:
        row = self._load(assignment_id)
        if row is None:
            raise NotFound("Assignment not found")
        for name, value in changes.items():
            setattr(row, name, value)
        self.db.commit()
        self.db.expire_all()
        return assignment_to_domain(self._load(assignment_id))

    def delete(self, assignment_id: int) -> None:
        row = self.db.get(AssignmentORM, assignment_id)
        if row is None:
            raise NotFound("Assignment not found")
        self.db.delete(row)
        self.db.commit()

    def add_submission(
        self, assignment_id: int, student_id: int, content: str, file_url: str | None, submitted_at: datetime
    ) -> Submission:
        row = SubmissionORM(
            assignment_id=assignment_id,
            student_id=student_id,
            content=content,
            file_url=file_url,
            submitted_at=submitted_at,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AlreadySubmitted(ALREADY_SUBMITTED) from exc
        self.db.refresh(row)
        return submission_to_domain(row)

    def stats(self, creator_id: int | None, now: datetime) -> AssignmentStats:
        per_assignment = (
            select(
                AssignmentORM.id.label("id"),
                AssignmentORM.due_date.label("due_date"),
                func.count(SubmissionORM.id).label("submissions"),
            )
            .outerjoin(SubmissionORM, SubmissionORM.assignment_id == AssignmentORM.id)
            .group_by(AssignmentORM.id, AssignmentORM.due_date)
        )
        if creator_id is not None:
            per_assignment = per_assignment.where(AssignmentORM.created_by_id == creator_id)
        sub = per_assignment.subquery()

        row = self.db.execute(
            select(
                func.count(sub.c.id),
                func.coalesce(func.sum(case((sub.c.due_date >= now, 1), else_=0)), 0),
                func.coalesce(func.sum(case((sub.c.due_date < now, 1), else_=0)), 0),
                func.coalesce(func.sum(sub.c.submissions), 0),
                func.coalesce(func.avg(sub.c.submissions), 0),
            )
        ).one()
        total, upcoming, overdue, submissions, avg = row
        return AssignmentStats(
            total_assignments=int(total),
            upcoming_assignments=int(upcoming),
            overdue_assignments=int(overdue),
            total_submissions=int(submissions),
            avg_submissions_per_assignment=float(avg),
        )
