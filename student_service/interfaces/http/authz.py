from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...domain.entities import Role
from ...domain.errors import TokenExpiredError, TokenInvalidError
from ...infrastructure.security import TokenService

# missing header is answered with 401 below, not HTTPBearer's 403
bearer = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def require_auth(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    tokens: TokenService = Depends(get_token_service),
) -> dict:
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Access denied",
                "message": "No token provided. Please include a valid JWT token in the Authorization header.",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = tokens.verify(creds.credentials)
    except TokenExpiredError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": "Token expired",
                "message": "Your authentication token has expired. Please login again.",
            },
            headers={"WWW-Authenticate": "Bearer"},
        )
    except TokenInvalidError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "Invalid token",
                "message": "The provided token is invalid or malformed.",
            },
        )
    request.state.user = claims
    return claims


def require_admin(claims: dict = Depends(require_auth)) -> dict:
    if claims.get("role") != Role.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Forbidden", "message": "Admin role required"},
        )
    return claims
