from datetime import timedelta

import pytest

from edusocial.domain.entities import Role, utcnow
from edusocial.domain.errors import AlreadySubmitted
from edusocial.infrastructure.db import Database
from edusocial.infrastructure.repositories import AssignmentRepository, UserRepository


@pytest.fixture
def session():
    database = Database("sqlite://")
    database.connect()
    database.create_schema()
    db = database.session()
    try:
        yield db
    finally:
        db.close()
        database.dispose()


def test_same_student_cannot_submit_twice_at_storage_level(session):
    users = UserRepository(session)
    professor = users.create("Paul Professor", "paul@example.com", "hash", Role.PROFESSOR)
    student = users.create("Sam Student", "sam@example.com", "hash", Role.STUDENT)
    assignments = AssignmentRepository(session)
    assignment = assignments.create("Essay", "Write an essay on graphs.", utcnow() + timedelta(days=3), professor.id)

    first = assignments.add_submission(assignment.id, student.id, "first", None, utcnow())
    assert first.student.id == student.id

    # both requests passed the in-memory duplicate check; the constraint rejects the second
    with pytest.raises(AlreadySubmitted) as exc:
        assignments.add_submission(assignment.id, student.id, "second", None, utcnow())
    assert exc.value.status_code == 400
    assert exc.value.message == "You have already submitted this assignment"

    stored = assignments.get(assignment.id)
    assert [s.content for s in stored.submissions] == ["first"]


def test_stats_average_is_not_rounded(session):
    users = UserRepository(session)
    professor = users.create("Paul Professor", "paul@example.com", "hash", Role.PROFESSOR)
    students = [users.create(f"Student {i}", f"s{i}@example.com", "hash", Role.STUDENT) for i in range(2)]
    assignments = AssignmentRepository(session)
    due = utcnow() + timedelta(days=3)
    ids = [assignments.create(f"Task {i}", "Some description here.", due, professor.id).id for i in range(3)]
    for s in students:
        assignments.add_submission(ids[0], s.id, "answer", None, utcnow())

    stats = assignments.stats(professor.id, utcnow())
    assert stats.total_submissions == 2
    assert stats.avg_submissions_per_assignment == pytest.approx(2 / 3)
