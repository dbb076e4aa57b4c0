from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ....application.dto import AssignmentQuery, AssignmentUpdate
from ....application.use_cases.manage_assignments import (
    AssignmentStatistics,
    CreateAssignment,
    DeleteAssignment,
    GetAssignment,
    ListAssignments,
    UpdateAssignment,
)
from ....application.use_cases.submit_assignment import SubmitAssignment
from ....domain.entities import Identity
from ....infrastructure.db import get_db
from ....infrastructure.metrics import assignments_created_total, submissions_total
from ....infrastructure.repositories import AssignmentRepository, UserRepository
from ..authz import get_current_user
from ..schemas import (
    AssignmentCreate,
    AssignmentDetailOut,
    AssignmentDetailResp,
    AssignmentListResp,
    AssignmentOut,
    AssignmentResp,
    AssignmentStatsResp,
    AssignmentUpdateReq,
    MessageResp,
    SubmitReq,
    SubmitResp,
)

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("", response_model=AssignmentListResp)
def list_assignments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Literal["upcoming", "overdue", "all"] = Query("all", alias="status"),
    sort_by: Literal["dueDate", "createdAt", "title"] = Query("dueDate", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    query = AssignmentQuery(page=page, limit=limit, status=status_filter, sort_by=sort_by, sort_order=sort_order)
    result = ListAssignments(AssignmentRepository(db)).execute(user, query)
    return AssignmentListResp.build(result)


@router.post("", response_model=AssignmentResp, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    uc = CreateAssignment(AssignmentRepository(db), UserRepository(db))
    assignment = uc.execute(user, payload.title, payload.description, payload.due_date)
    assignments_created_total.inc()
    return AssignmentResp(assignment=AssignmentOut.from_domain(assignment))


# declared before /{assignment_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=AssignmentStatsResp)
def assignment_stats(user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    stats = AssignmentStatistics(AssignmentRepository(db)).execute(user)
    return AssignmentStatsResp.build(stats)


@router.get("/{assignment_id}", response_model=AssignmentDetailResp)
def get_assignment(assignment_id: int, user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    assignment = GetAssignment(AssignmentRepository(db)).execute(user, assignment_id)
    return AssignmentDetailResp(assignment=AssignmentDetailOut.from_domain(assignment))


@router.put("/{assignment_id}", response_model=AssignmentResp)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdateReq,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    update = AssignmentUpdate(title=payload.title, description=payload.description, due_date=payload.due_date)
    assignment = UpdateAssignment(AssignmentRepository(db)).execute(user, assignment_id, update)
    return AssignmentResp(assignment=AssignmentOut.from_domain(assignment))


@router.delete("/{assignment_id}", response_model=MessageResp)
def delete_assignment(assignment_id: int, user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    DeleteAssignment(AssignmentRepository(db)).execute(user, assignment_id)
    return MessageResp(message="Assignment deleted successfully")


@router.post("/{assignment_id}/submit", response_model=SubmitResp, status_code=status.HTTP_201_CREATED)
def submit_assignment(
    assignment_id: int,
    payload: SubmitReq,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    uc = SubmitAssignment(AssignmentRepository(db), UserRepository(db))
    submission = uc.execute(user, assignment_id, payload.content, payload.file_url)
    submissions_total.inc()
    return SubmitResp(submitted_at=submission.submitted_at)
