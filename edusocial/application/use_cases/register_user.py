import structlog

from ...domain.entities import Identity, Role, User
from ...domain.errors import Conflict
from ..dto import AuthResult

logger = structlog.get_logger()


class IUserRepository:
    def get_by_email(self, email: str) -> User | None: ...
    def get_password_hash(self, email: str) -> tuple[User, str] | None: ...
    def get_by_id(self, user_id: int) -> User | None: ...
    def count(self) -> int: ...
    def create(self, name: str, email: str, password_hash: str, role: Role = Role.STUDENT) -> User: ...
    def list_all(self) -> list[User]: ...
    def update_role(self, user_id: int, role: Role) -> User: ...
    def count_by_role(self) -> dict[Role, int]: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...


class ITokenService:
    def create_access_token(self, identity: Identity) -> str: ...


def identity_of(user: User) -> Identity:
    return Identity(id=user.id, name=user.name, email=user.email, role=user.role)


class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher, tokens: ITokenService):
        self.repo = repo
        self.hasher = hasher
        self.tokens = tokens

    def execute(self, name: str, email: str, password: str, role: Role | None = None) -> AuthResult:
        # ``role`` is accepted from clients but never grants privileges:
        # the very first account is the admin, everyone else starts as a student.
        email = email.strip().lower()
        if self.repo.get_by_email(email):
            raise Conflict("Email already registered")
        assigned = Role.ADMIN if self.repo.count() == 0 else Role.STUDENT
        user = self.repo.create(name.strip(), email, self.hasher.hash(password), assigned)
        logger.info("user_registered", user_id=user.id, role=user.role.value, requested_role=role and role.value)
        return AuthResult(user=user, token=self.tokens.create_access_token(identity_of(user)))
