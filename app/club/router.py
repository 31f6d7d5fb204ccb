"""
Club Management Router

배구 클럽 관리 메인 라우터 (/api)
- 선수 (players 하위 라우터)
- 팀 구성
- 출석 관리
- 코치, 클럽 설정
- 대시보드
"""

from datetime import date
from typing import Optional, List
from fastapi import APIRouter, Depends, Query, status

from .dependencies import get_club_service, require_admin, require_superadmin
from .errors import ValidationError
from .models import (
    Attendance,
    AttendanceCreate,
    AttendanceSheetEntry,
    ClubSettings,
    ClubSettingsData,
    Coach,
    CoachCreate,
    DashboardSummary,
    MonthlyJoinBucket,
    OverdueEntry,
    Team,
    TeamCandidate,
    TeamCreate,
    TeamGroup,
    TeamUpdate,
    TopAthlete,
    TournamentGroup,
)
from .players import players_router
from .rules import TOP_ATHLETES_LIMIT
from .service import ClubService
from .terminology import parse_main_category, parse_sub_category

router = APIRouter(prefix="/api", tags=["Club Management"])

router.include_router(players_router)


# =============================================
# Teams
# =============================================

teams_router = APIRouter(prefix="/teams", tags=["Teams"])


@teams_router.get("", response_model=List[Team])
async def list_teams(service: ClubService = Depends(get_club_service)):
    return await service.list_teams()


@teams_router.get("/grouped", response_model=List[TeamGroup])
async def list_teams_grouped(service: ClubService = Depends(get_club_service)):
    """Avanzado, Intermedio, Básico groups, teams by name"""
    return await service.teams_by_sub_category()


@teams_router.get("/candidates", response_model=List[TeamCandidate])
async def team_candidates(
    main_category: Optional[str] = Query(None, alias="mainCategory"),
    team_id: Optional[str] = Query(None, alias="teamId"),
    service: ClubService = Depends(get_club_service),
):
    """
    로스터 후보 선수

    Creating (mainCategory only): most attended first.
    Editing (teamId): the team's category, highest total score first;
    the team's own members stay eligible.
    """
    if team_id is None and not main_category:
        raise ValidationError("mainCategory", "mainCategory or teamId is required")
    category = parse_main_category(main_category) if main_category else None
    return await service.team_candidates(category, team_id)


@teams_router.get("/{team_id}", response_model=Team)
async def get_team(team_id: str, service: ClubService = Depends(get_club_service)):
    return await service.get_team(team_id)


@teams_router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(body: TeamCreate, service: ClubService = Depends(get_club_service)):
    """팀 생성 (6-14 players, category table, one team per main category per player)"""
    return await service.create_team(body)


@teams_router.put("/{team_id}", response_model=Team)
async def update_team(team_id: str, body: TeamUpdate, service: ClubService = Depends(get_club_service)):
    """팀 수정 (categories are fixed at creation)"""
    return await service.update_team(team_id, body)


# =============================================
# Attendance
# =============================================

attendance_router = APIRouter(prefix="/attendances", tags=["Attendance"])


@attendance_router.get("", response_model=List[Attendance])
async def list_attendances(service: ClubService = Depends(get_club_service)):
    return await service.list_attendances()


@attendance_router.post("", response_model=Attendance)
async def record_attendance(body: AttendanceCreate, service: ClubService = Depends(get_club_service)):
    """오늘 출석 기록 (same day again overwrites)"""
    return await service.record_attendance(body.player_id, body.status)


@attendance_router.get("/sheet", response_model=List[AttendanceSheetEntry])
async def attendance_sheet(
    day: Optional[date] = Query(None, alias="date"),
    main_category: Optional[str] = Query(None, alias="mainCategory"),
    sub_category: Optional[str] = Query(None, alias="subCategory"),
    service: ClubService = Depends(get_club_service),
):
    """출석부: every player with Presente / Ausente / Pending for the day"""
    return await service.attendance_sheet(
        day,
        parse_main_category(main_category) if main_category else None,
        parse_sub_category(sub_category) if sub_category else None,
    )


# =============================================
# Coaches
# =============================================

coaches_router = APIRouter(prefix="/coaches", tags=["Coaches"])


@coaches_router.get("", response_model=List[Coach])
async def list_coaches(service: ClubService = Depends(get_club_service)):
    return await service.list_coaches()


@coaches_router.post(
    "",
    response_model=Coach,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_coach(body: CoachCreate, service: ClubService = Depends(get_club_service)):
    return await service.create_coach(body)


# =============================================
# Club settings
# =============================================

settings_router = APIRouter(prefix="/club-settings", tags=["Club Settings"])


@settings_router.get("", response_model=ClubSettings)
async def get_club_settings(service: ClubService = Depends(get_club_service)):
    """클럽 설정 (defaults on first access)"""
    return await service.get_settings()


@settings_router.put("", response_model=ClubSettings, dependencies=[Depends(require_superadmin)])
async def update_club_settings(body: ClubSettingsData, service: ClubService = Depends(get_club_service)):
    return await service.update_settings(body)


# =============================================
# Dashboard
# =============================================

dashboard_router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@dashboard_router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary(service: ClubService = Depends(get_club_service)):
    """
    클럽 대시보드 요약

    Player count, team count and today's attendance percentage.
    """
    return await service.dashboard_summary()


@dashboard_router.get("/top-athletes", response_model=List[TopAthlete])
async def top_athletes(
    limit: int = Query(TOP_ATHLETES_LIMIT, ge=1, le=50),
    service: ClubService = Depends(get_club_service),
):
    return await service.top_athletes(limit)


@dashboard_router.get("/monthly-joins", response_model=List[MonthlyJoinBucket])
async def monthly_joins(service: ClubService = Depends(get_club_service)):
    """Last 12 calendar months, oldest first"""
    return await service.monthly_joins()


@dashboard_router.get("/tournaments", response_model=List[TournamentGroup])
async def tournaments(service: ClubService = Depends(get_club_service)):
    return await service.tournaments()


@dashboard_router.get("/overdue-payments", response_model=List[OverdueEntry])
async def overdue_payments(service: ClubService = Depends(get_club_service)):
    """연체 선수 (largest debt first; empty when monthly payments are off)"""
    return await service.overdue_payments()


router.include_router(teams_router)
router.include_router(attendance_router)
router.include_router(coaches_router)
router.include_router(settings_router)
router.include_router(dashboard_router)
