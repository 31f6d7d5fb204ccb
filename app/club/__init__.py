"""
Club Management Module

Volleyball club manager
- 선수 등록, 결제, 퇴출
- 팀 구성 (카테고리/로스터 규칙)
- 출석 관리
- 코치, 클럽 설정
"""

from .terminology import (
    MainCategory,
    SubCategory,
    Position,
    AttendanceStatus,
)
from .errors import (
    ClubError,
    ValidationError,
    NotFoundError,
    ConflictError,
    TransportError,
)

__all__ = [
    "MainCategory",
    "SubCategory",
    "Position",
    "AttendanceStatus",
    "ClubError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
]
