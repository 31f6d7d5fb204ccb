"""
Player API Router

선수 등록/수정/삭제, 결제, 퇴출, 능력치 기록 및 조회
"""

from typing import Optional, List
from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_club_service
from ..models import (
    Attendance,
    AverageStats,
    ExpelRequest,
    OverdueStatus,
    Player,
    PlayerCreate,
    PlayerStats,
    PlayerUpdate,
    StatsRecord,
    Team,
)
from ..service import ClubService
from ..terminology import parse_main_category, parse_sub_category

router = APIRouter(prefix="/players", tags=["Players"])


# =============================================
# 조회
# =============================================

@router.get("", response_model=List[Player])
async def list_players(
    main_category: Optional[str] = Query(None, alias="mainCategory"),
    sub_category: Optional[str] = Query(None, alias="subCategory"),
    service: ClubService = Depends(get_club_service),
):
    """
    선수 목록

    Newest members first. mainCategory / subCategory narrow the list
    (display labels or storage values).
    """
    if main_category is None and sub_category is None:
        return await service.list_players()
    return await service.filter_players(
        parse_main_category(main_category) if main_category else None,
        parse_sub_category(sub_category) if sub_category else None,
    )


@router.get("/document/{document}", response_model=Player)
async def get_player_by_document(document: str, service: ClubService = Depends(get_club_service)):
    return await service.get_player_by_document(document)


@router.get("/{player_id}", response_model=Player)
async def get_player(player_id: str, service: ClubService = Depends(get_club_service)):
    return await service.get_player(player_id)


# =============================================
# 등록 / 수정 / 삭제
# =============================================

@router.post("", response_model=Player, status_code=status.HTTP_201_CREATED)
async def create_player(body: PlayerCreate, service: ClubService = Depends(get_club_service)):
    """선수 등록 (joinDate = now, one seed stats record)"""
    return await service.create_player(body)


@router.put("/{player_id}", response_model=Player)
async def update_player(
    player_id: str,
    body: PlayerUpdate,
    service: ClubService = Depends(get_club_service),
):
    """선수 수정 (joinDate is kept)"""
    return await service.update_player(player_id, body)


@router.delete("/{player_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_player(player_id: str, service: ClubService = Depends(get_club_service)):
    await service.delete_player(player_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================
# 결제 / 퇴출
# =============================================

@router.post("/{player_id}/payment", response_model=Player)
async def record_payment(player_id: str, service: ClubService = Depends(get_club_service)):
    """월회비 납부"""
    return await service.record_payment(player_id)


@router.get("/{player_id}/overdue", response_model=OverdueStatus)
async def get_overdue(player_id: str, service: ClubService = Depends(get_club_service)):
    return await service.player_overdue(player_id)


@router.post("/{player_id}/expel", status_code=status.HTTP_204_NO_CONTENT)
async def expel_player(
    player_id: str,
    body: Optional[ExpelRequest] = None,
    service: ClubService = Depends(get_club_service),
):
    """
    선수 퇴출

    Deletes the player for good. Requires {"confirm": true} and at least
    three overdue months.
    """
    confirm = body.confirm if body is not None else False
    await service.expel_player(player_id, confirm)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================
# 능력치
# =============================================

@router.post("/{player_id}/stats", response_model=Player, status_code=status.HTTP_201_CREATED)
async def add_stats_record(
    player_id: str,
    body: PlayerStats,
    service: ClubService = Depends(get_club_service),
):
    """새 능력치 평가 기록"""
    return await service.add_stats_record(player_id, body)


@router.get("/{player_id}/stats-history", response_model=List[StatsRecord])
async def get_stats_history(
    player_id: str,
    range_name: str = Query("quarterly", alias="range", description="quarterly | semiannually | yearly"),
    service: ClubService = Depends(get_club_service),
):
    return await service.stats_history(player_id, range_name)


@router.get("/{player_id}/peer-average", response_model=Optional[AverageStats])
async def get_peer_average(player_id: str, service: ClubService = Depends(get_club_service)):
    """Same-position average; null when the player has no peers"""
    return await service.peer_average(player_id)


# =============================================
# 팀 / 출석
# =============================================

@router.get("/{player_id}/teams", response_model=List[Team])
async def list_player_teams(player_id: str, service: ClubService = Depends(get_club_service)):
    return await service.list_teams_for_player(player_id)


@router.get("/{player_id}/attendances", response_model=List[Attendance])
async def list_player_attendances(player_id: str, service: ClubService = Depends(get_club_service)):
    """Newest first"""
    return await service.list_attendances_for_player(player_id)
