from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter

from ....application.dto import RegisterUserInput
from ....application.use_cases.authenticate_user import AuthenticateUser
from ....application.use_cases.register_user import RegisterUser
from ....config import Settings
from ....domain.errors import DuplicateEmailError, InvalidCredentialsError
from ....infrastructure.repositories import InMemoryUserRepository
from ....infrastructure.security import TokenService
from ..authz import get_token_service, require_admin, require_auth
from ..dependencies import get_user_repo
from ..ratelimit import LOGIN_LIMIT, get_rate_limited, register_limit
from ..schemas import LoginReq, RegisterReq, TokenResp, UserListResp, UserOut, UserResp

router = APIRouter(prefix="/auth", tags=["auth"])


def _register_impl(request: Request, payload: RegisterReq, users: InMemoryUserRepository):
    uc = RegisterUser(repo=users)
    try:
        user = uc.execute(RegisterUserInput(email=payload.email, password=payload.password, name=payload.name))
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"error": "Registration failed", "message": e.detail},
        )
    return UserResp(message="User registered successfully", user=UserOut.model_validate(user))


def _login_impl(request: Request, payload: LoginReq, users: InMemoryUserRepository, tokens: TokenService):
    uc = AuthenticateUser(repo=users, tokens=tokens)
    try:
        result = uc.execute(payload.email, payload.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Login failed", "message": e.detail},
        )
    return TokenResp(message="Login successful", token=result.token, user=UserOut.model_validate(result.user))


def build_rate_limited(limiter: Limiter, settings: Settings) -> dict:
    """Wrap the register/login bodies once per app, with that app's limiter."""
    return {
        "register": limiter.limit(register_limit(settings))(_register_impl),
        "login": limiter.limit(LOGIN_LIMIT)(_login_impl),
    }


@router.post("/register", response_model=UserResp, status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    payload: RegisterReq,
    users: InMemoryUserRepository = Depends(get_user_repo),
    limited: dict = Depends(get_rate_limited),
):
    return limited["register"](request, payload, users)


@router.post("/login", response_model=TokenResp)
def login(
    request: Request,
    payload: LoginReq,
    users: InMemoryUserRepository = Depends(get_user_repo),
    tokens: TokenService = Depends(get_token_service),
    limited: dict = Depends(get_rate_limited),
):
    return limited["login"](request, payload, users, tokens)


@router.get("/me", response_model=UserResp)
def me(
    claims: dict = Depends(require_auth),
    users: InMemoryUserRepository = Depends(get_user_repo),
):
    user = users.find_by_id(claims.get("id"))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Access denied", "message": "User not found"},
        )
    return UserResp(message="User retrieved successfully", user=UserOut.model_validate(user.to_public()))


@router.get("/users", response_model=UserListResp, dependencies=[Depends(require_admin)])
def list_users(users: InMemoryUserRepository = Depends(get_user_repo)):
    rows = users.get_all()
    return UserListResp(
        message="Users retrieved successfully",
        count=len(rows),
        users=[UserOut.model_validate(u) for u in rows],
    )
