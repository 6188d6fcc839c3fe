"""
Bearer Token Authentication Module

Protected endpoints expect an "Authorization: Bearer <jwt>" header carrying
a token issued by /farmer/login or /objection/admin/login.
"""

import secrets
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from objections.config import Settings
from objections.errors import AuthenticationFailed
from objections.roles import ROLE_FARMER, require_role
from objections.service.dependencies import get_token_service
from objections.tokens import Claims, TokenService

_bearer = HTTPBearer(auto_error=False)


async def get_claims(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    """
    Verify the bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return tokens.verify(credentials.credentials)
    except AuthenticationFailed:
        raise HTTPException(
            status_code=401,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_farmer(claims: Claims = Depends(get_claims)) -> Claims:
    """Only farmer tokens may use farmer routes."""
    require_role(claims.role, ROLE_FARMER)
    return claims


def check_admin_credentials(settings: Settings, username: str, password: str) -> None:
    """
    Compare admin login against ADMIN_USERNAME / ADMIN_PASSWORD.

    Raises:
        AuthenticationFailed: Wrong credentials, or admin login not configured
    """
    if not settings.admin_username or not settings.admin_password:
        raise AuthenticationFailed("Bad credentials")
    username_ok = secrets.compare_digest(username.encode('utf-8'), settings.admin_username.encode('utf-8'))
    password_ok = secrets.compare_digest(password.encode('utf-8'), settings.admin_password.encode('utf-8'))
    if not (username_ok and password_ok):
        raise AuthenticationFailed("Bad credentials")
