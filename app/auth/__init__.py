"""
Auth Module - 로그인 및 역할 토큰
"""
from .router import router as auth_router, create_access_token, decode_role, get_current_role
from .models import UserRole, LoginRequest, LoginResponse
from .credentials import (
    CredentialVerifier,
    StaticCredentialVerifier,
    CoachDocumentVerifier,
    authenticate,
)

__all__ = [
    "auth_router",
    "create_access_token",
    "decode_role",
    "get_current_role",
    "UserRole",
    "LoginRequest",
    "LoginResponse",
    "CredentialVerifier",
    "StaticCredentialVerifier",
    "CoachDocumentVerifier",
    "authenticate",
]
