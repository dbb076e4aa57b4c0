from datetime import datetime

import structlog

from ...domain.entities import Assignment, Identity, Role, Submission, utcnow, validate_due_date
from ...domain.errors import Forbidden, NotFound, ValidationError
from ...domain.policy import Action, authorize, owner_scope
from ..dto import AssignmentPage, AssignmentQuery, AssignmentStats, AssignmentUpdate
from .register_user import IUserRepository

logger = structlog.get_logger()

ASSIGNMENT_NOT_FOUND = "Assignment not found"
CREATOR_ROLES = (Role.PROFESSOR, Role.ADMIN)


class IAssignmentRepository:
    def create(self, title: str, description: str, due_date: datetime, creator_id: int) -> Assignment: ...
    def get(self, assignment_id: int) -> Assignment | None: ...
    def list(self, query: AssignmentQuery, creator_id: int | None, now: datetime) -> tuple[list[Assignment], int]: ...
    def update(self, assignment_id: int, changes: dict) -> Assignment: ...
    def delete(self, assignment_id: int) -> None: ...
    def add_submission(
        self, assignment_id: int, student_id: int, content: str, file_url: str | None, submitted_at: datetime
    ) -> Submission: ...
    def stats(self, creator_id: int | None, now: datetime) -> AssignmentStats: ...


def load_assignment(repo: IAssignmentRepository, assignment_id: int) -> Assignment:
    assignment = repo.get(assignment_id)
    if assignment is None:
        raise NotFound(ASSIGNMENT_NOT_FOUND)
    return assignment


class CreateAssignment:
    def __init__(self, assignments: IAssignmentRepository, users: IUserRepository):
        self.assignments = assignments
        self.users = users

    def execute(self, actor: Identity, title: str, description: str, due_date: datetime) -> Assignment:
        authorize(actor, Action.CREATE_ASSIGNMENT)
        due_date = validate_due_date(due_date)
        # the token may predate a role change, so the stored role decides
        creator = self.users.get_by_id(actor.id)
        if creator is None:
            raise NotFound("Creator not found")
        if creator.role not in CREATOR_ROLES:
            raise Forbidden("Only professors and admins can create assignments")
        assignment = self.assignments.create(title, description, due_date, creator.id)
        logger.info("assignment_created", assignment_id=assignment.id, title=title, created_by=creator.id)
        return assignment


class ListAssignments:
    def __init__(self, assignments: IAssignmentRepository):
        self.assignments = assignments

    def execute(self, actor: Identity, query: AssignmentQuery) -> AssignmentPage:
        creator_id = owner_scope(actor, Action.LIST_ASSIGNMENTS)
        items, total = self.assignments.list(query, creator_id, utcnow())
        return AssignmentPage(items=items, total=total, page=query.page, limit=query.limit)


class GetAssignment:
    def __init__(self, assignments: IAssignmentRepository):
        self.assignments = assignments

    def execute(self, actor: Identity, assignment_id: int) -> Assignment:
        assignment = load_assignment(self.assignments, assignment_id)
        authorize(actor, Action.READ_ASSIGNMENT, owner_id=assignment.created_by.id)
        if actor.role == Role.STUDENT:
            assignment.submissions = [s for s in assignment.submissions if s.student.id == actor.id]
        return assignment


class UpdateAssignment:
    def __init__(self, assignments: IAssignmentRepository):
        self.assignments = assignments

    def execute(self, actor: Identity, assignment_id: int, update: AssignmentUpdate) -> Assignment:
        authorize(actor, Action.UPDATE_ASSIGNMENT)
        assignment = load_assignment(self.assignments, assignment_id)
        authorize(actor, Action.UPDATE_ASSIGNMENT, owner_id=assignment.created_by.id)
        if update.due_date is not None:
            update.due_date = validate_due_date(update.due_date)
        changes = update.changes()
        if not changes:
            return assignment
        updated = self.assignments.update(assignment_id, changes)
        logger.info("assignment_updated", assignment_id=assignment_id, fields=sorted(changes), by=actor.id)
        return updated


class DeleteAssignment:
    def __init__(self, assignments: IAssignmentRepository):
        self.assignments = assignments

    def execute(self, actor: Identity, assignment_id: int) -> None:
        authorize(actor, Action.DELETE_ASSIGNMENT)
        assignment = load_assignment(self.assignments, assignment_id)
        authorize(actor, Action.DELETE_ASSIGNMENT, owner_id=assignment.created_by.id)
        if assignment.submission_count() > 0:
            raise ValidationError(
                "Cannot delete assignment with existing submissions",
                submissionCount=assignment.submission_count(),
            )
        self.assignments.delete(assignment_id)
        logger.info("assignment_deleted", assignment_id=assignment_id, title=assignment.title, by=actor.id)


class AssignmentStatistics:
    def __init__(self, assignments: IAssignmentRepository):
        self.assignments = assignments

    def execute(self, actor: Identity) -> AssignmentStats:
        creator_id = owner_scope(actor, Action.VIEW_ASSIGNMENT_STATS)
        return self.assignments.stats(creator_id, utcnow())
