from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ....application.use_cases.authenticate_user import LoginUser
from ....application.use_cases.register_user import RegisterUser
from ....domain.entities import Identity, User
from ....infrastructure.db import get_db
from ....infrastructure.metrics import users_registered_total
from ....infrastructure.repositories import UserRepository
from ..authz import get_current_user
from ..ratelimit import limiter, login_limit, register_limit
from ..schemas import AuthResp, LoginReq, RegisterReq, UserOut, UserResp

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(register_limit)
def register(request: Request, payload: RegisterReq, db: Session = Depends(get_db)):
    state = request.app.state
    uc = RegisterUser(repo=UserRepository(db), hasher=state.hasher, tokens=state.tokens)
    result = uc.execute(payload.name, payload.email, payload.password, payload.role)
    users_registered_total.labels(role=result.user.role.value).inc()
    return AuthResp(user=UserOut.from_domain(result.user), token=result.token)


@router.post("/login", response_model=AuthResp)
@limiter.limit(login_limit)
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    state = request.app.state
    uc = LoginUser(repo=UserRepository(db), hasher=state.hasher, tokens=state.tokens)
    result = uc.execute(payload.email, payload.password)
    return AuthResp(user=UserOut.from_domain(result.user), token=result.token)


@router.get("/me", response_model=UserResp)
def me(identity: Identity = Depends(get_current_user)):
    # built from the verified token claims
    user = User(id=identity.id, name=identity.name, email=identity.email, role=identity.role)
    return UserResp(user=UserOut.from_domain(user))
