import structlog

from ...domain.entities import PublicUser
from ...domain.errors import DuplicateEmailError
from ..dto import RegisterUserInput
from ..ports import IUserRepository

logger = structlog.get_logger()


class RegisterUser:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, data: RegisterUserInput) -> PublicUser:
        if self.repo.find_by_email(data.email):
            raise DuplicateEmailError("User with this email already exists")
        user = self.repo.create(email=data.email, password=data.password, name=data.name)
        logger.info("user_registered", user_id=user.id, email=user.email)
        return user
