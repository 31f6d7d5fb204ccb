"""
Player Module

선수 API
- 등록, 수정, 삭제
- 월회비 결제 및 퇴출
- 능력치 기록 및 비교
"""

from .router import router as players_router

__all__ = ["players_router"]
