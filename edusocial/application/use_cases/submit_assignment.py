import structlog

from ...domain.entities import Identity, Role, Submission, utc_isoformat, utcnow
from ...domain.errors import AlreadySubmitted, Forbidden, NotFound, ValidationError
from ...domain.policy import Action, authorize
from .manage_assignments import IAssignmentRepository, load_assignment
from .register_user import IUserRepository

logger = structlog.get_logger()

DEADLINE_PASSED = "Assignment submission deadline has passed"
ALREADY_SUBMITTED = "You have already submitted this assignment"


class SubmitAssignment:
    def __init__(self, assignments: IAssignmentRepository, users: IUserRepository):
        self.assignments = assignments
        self.users = users

    def execute(self, actor: Identity, assignment_id: int, content: str, file_url: str | None = None) -> Submission:
        authorize(actor, Action.SUBMIT_ASSIGNMENT)
        assignment = load_assignment(self.assignments, assignment_id)
        now = utcnow()
        if assignment.is_overdue(now):
            raise ValidationError(DEADLINE_PASSED, dueDate=utc_isoformat(assignment.due_date))
        if assignment.has_student_submitted(actor.id):
            raise AlreadySubmitted(ALREADY_SUBMITTED)
        student = self.users.get_by_id(actor.id)
        if student is None:
            raise NotFound("Student not found")
        if student.role != Role.STUDENT:
            raise Forbidden("Only students can submit assignments")
        # a concurrent duplicate is rejected by the repository as AlreadySubmitted
        submission = self.assignments.add_submission(assignment.id, student.id, content, file_url, now)
        logger.info("assignment_submitted", assignment_id=assignment.id, student_id=student.id)
        return submission
