"""
Auth Router - FastAPI 인증 라우터
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from loguru import logger

from app.config import get_settings
from database import get_store

from .credentials import CredentialVerifier, authenticate, default_verifiers
from .models import LoginRequest, LoginResponse, UserRole

router = APIRouter(prefix="/api/auth", tags=["auth"])


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """JWT 토큰 생성"""
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_role(token: str) -> UserRole:
    """토큰 -> 역할 (invalid or expired: NONE)"""
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return UserRole.NONE

    try:
        return UserRole(payload.get("role"))
    except ValueError:
        return UserRole.NONE


def get_current_role(request: Request) -> UserRole:
    """Role from the Authorization: Bearer header"""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return UserRole.NONE
    return decode_role(auth_header.split(" ", 1)[1])


def get_verifiers() -> List[CredentialVerifier]:
    return default_verifiers(get_settings(), get_store())


@router.post("/login", response_model=LoginResponse, response_model_by_alias=True)
async def login(body: LoginRequest, verifiers: List[CredentialVerifier] = Depends(get_verifiers)):
    """
    로그인

    admin / superAdmin accounts first, then coaches (document as user and pass).
    """
    role = await authenticate(verifiers, body.user, body.pass_)
    if role == UserRole.NONE:
        return JSONResponse(
            status_code=401,
            content={"success": False, "userType": None},
        )

    token = create_access_token({"sub": body.user, "role": role.value})
    return LoginResponse(success=True, user_type=role, access_token=token)
