import structlog

from ...domain.errors import InvalidCredentialsError
from ..dto import LoginResult
from ..ports import ITokenService, IUserRepository

logger = structlog.get_logger()


class AuthenticateUser:
    """Checks credentials and issues an access token for the account."""

    def __init__(self, repo: IUserRepository, tokens: ITokenService):
        self.repo = repo
        self.tokens = tokens

    def execute(self, email: str, password: str) -> LoginResult:
        user = self.repo.find_by_email(email)
        # same error for unknown email and wrong password
        if user is None or not self.repo.validate_password(user, password):
            logger.warning("login_failed", email=email)
            raise InvalidCredentialsError()
        public = user.to_public()
        token = self.tokens.issue(public)
        logger.info("login_succeeded", user_id=user.id)
        return LoginResult(token=token, user=public)
