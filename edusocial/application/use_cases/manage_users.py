import structlog

from ...domain.entities import Identity, Role, User
from ...domain.errors import NotFound, ValidationError
from ...domain.policy import Action, authorize
from ..dto import UserStats
from .register_user import IUserRepository

logger = structlog.get_logger()


class ListUsers:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, actor: Identity) -> list[User]:
        authorize(actor, Action.MANAGE_USERS)
        return self.repo.list_all()


class ChangeUserRole:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, actor: Identity, user_id: int, role: Role) -> User:
        authorize(actor, Action.MANAGE_USERS)
        target = self.repo.get_by_id(user_id)
        if target is None:
            raise NotFound("User not found")
        if target.id == actor.id and role != Role.ADMIN:
            raise ValidationError("You cannot change your own admin role")
        updated = self.repo.update_role(user_id, role)
        logger.info("user_role_changed", user_id=user_id, old_role=target.role.value, new_role=role.value, by=actor.id)
        return updated


class UserStatistics:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, actor: Identity) -> UserStats:
        authorize(actor, Action.MANAGE_USERS)
        counts = self.repo.count_by_role()
        return UserStats(
            total=sum(counts.values()),
            admins=counts.get(Role.ADMIN, 0),
            professors=counts.get(Role.PROFESSOR, 0),
            students=counts.get(Role.STUDENT, 0),
        )
