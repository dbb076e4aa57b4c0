import structlog

from ...domain.errors import Unauthorized
from ..dto import AuthResult
from .register_user import IPasswordHasher, ITokenService, IUserRepository, identity_of

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"


class LoginUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher, tokens: ITokenService):
        self.repo = repo
        self.hasher = hasher
        self.tokens = tokens

    def execute(self, email: str, password: str) -> AuthResult:
        found = self.repo.get_password_hash(email.strip().lower())
        # same message for unknown email and wrong password
        if not found or not self.hasher.verify(password, found[1]):
            logger.info("login_failed")
            raise Unauthorized(INVALID_CREDENTIALS)
        user = found[0]
        logger.info("user_logged_in", user_id=user.id)
        return AuthResult(user=user, token=self.tokens.create_access_token(identity_of(user)))
