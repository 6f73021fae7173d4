class DomainError(Exception):
    """Base class for failures raised by stores and services.

    Each subclass carries a fixed message; routers match on the type to pick
    the HTTP status.
    """
    message = "Domain error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class DuplicateEmailError(DomainError):
    message = "A record with this email already exists"


class StudentNotFoundError(DomainError):
    message = "Student not found"


class InvalidCredentialsError(DomainError):
    message = "Invalid email or password"


class TokenExpiredError(DomainError):
    message = "Token has expired"


class TokenInvalidError(DomainError):
    message = "Token is invalid or malformed"
