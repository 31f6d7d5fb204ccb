"""
Auth Models - Pydantic 모델 정의
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """로그인 역할"""
    ADMIN = "admin"
    SUPER_ADMIN = "superAdmin"
    COACH = "coach"
    NONE = "none"


class LoginRequest(BaseModel):
    """로그인 요청 {user, pass}"""
    model_config = ConfigDict(populate_by_name=True)

    user: str
    pass_: str = Field(..., alias="pass")


class LoginResponse(BaseModel):
    """로그인 결과"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    user_type: Optional[UserRole] = Field(None, alias="userType")
    access_token: Optional[str] = Field(None, alias="accessToken")
