from datetime import datetime, timedelta, timezone

import pytest

from edusocial.application.dto import AssignmentPage, AssignmentUpdate
from edusocial.domain.entities import Assignment, Submission, UserRef, to_naive_utc, validate_due_date
from edusocial.domain.errors import ValidationError

NOW = datetime(2026, 3, 1, 12, 0, 0)
CREATOR = UserRef(id=1, name="Prof", email="prof@example.com")


def make_assignment(due, submissions=()):
    return Assignment(
        id=1,
        title="Title",
        description="Description text",
        due_date=due,
        created_by=CREATOR,
        submissions=list(submissions),
    )


def make_submission(student_id):
    student = UserRef(id=student_id, name=f"Student {student_id}", email=f"s{student_id}@example.com")
    return Submission(id=student_id, student=student, content="answer", file_url=None, submitted_at=NOW)


def test_overdue_is_derived_from_due_date():
    assert make_assignment(NOW - timedelta(seconds=1)).is_overdue(NOW)
    assert not make_assignment(NOW).is_overdue(NOW)
    assert not make_assignment(NOW + timedelta(days=1)).is_overdue(NOW)


def test_submission_lookup_and_count():
    a = make_assignment(NOW, [make_submission(7), make_submission(8)])
    assert a.submission_count() == 2
    assert a.has_student_submitted(7)
    assert not a.has_student_submitted(9)
    assert a.submission_by_student(8).student.name == "Student 8"


def test_due_date_grace_window():
    assert validate_due_date(NOW - timedelta(hours=23), now=NOW) == NOW - timedelta(hours=23)
    with pytest.raises(ValidationError):
        validate_due_date(NOW - timedelta(hours=24), now=NOW)


def test_due_date_normalized_to_naive_utc():
    aware = datetime(2026, 3, 2, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert validate_due_date(aware, now=NOW) == datetime(2026, 3, 2, 12, 0)
    assert to_naive_utc(NOW) is NOW


def test_pagination_math():
    page = AssignmentPage(items=[], total=21, page=2, limit=10)
    assert page.pages == 3
    assert page.has_next and page.has_prev
    last = AssignmentPage(items=[], total=21, page=3, limit=10)
    assert not last.has_next


def test_update_changes_skip_unset_fields():
    assert AssignmentUpdate(title="New").changes() == {"title": "New"}
    assert AssignmentUpdate().changes() == {}
