from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ....application.use_cases.manage_users import ChangeUserRole, ListUsers, UserStatistics
from ....domain.entities import Identity
from ....infrastructure.db import get_db
from ....infrastructure.repositories import UserRepository
from ..authz import get_current_user
from ..schemas import RoleUpdateReq, UserListResp, UserOut, UserResp, UserStatsResp

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResp)
def list_users(user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    users = ListUsers(UserRepository(db)).execute(user)
    return UserListResp(users=[UserOut.from_domain(u) for u in users])


@router.get("/stats", response_model=UserStatsResp)
def user_stats(user: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserStatsResp.build(UserStatistics(UserRepository(db)).execute(user))


@router.patch("/{user_id}/role", response_model=UserResp)
def change_role(
    user_id: int,
    payload: RoleUpdateReq,
    user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = ChangeUserRole(UserRepository(db)).execute(user, user_id, payload.role)
    return UserResp(user=UserOut.from_domain(updated))
