"""
Club Management Dependencies

서비스 주입 및 권한 체크 의존성
"""

from fastapi import Depends, HTTPException, status

from app.auth.models import UserRole
from app.auth.router import get_current_role
from database import get_store

from .service import ClubService


def get_club_service() -> ClubService:
    """Service bound to the process-wide store"""
    return ClubService(get_store())


def require_roles(*allowed_roles: UserRole):
    """특정 역할 필요"""
    def _check(role: UserRole = Depends(get_current_role)) -> UserRole:
        if role == UserRole.NONE:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="login required",
            )
        if role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"allowed roles: {', '.join(r.value for r in allowed_roles)}",
            )
        return role
    return _check


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_superadmin = require_roles(UserRole.SUPER_ADMIN)
