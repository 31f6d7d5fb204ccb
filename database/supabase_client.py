"""
Supabase 데이터베이스 클라이언트

ClubStore backed by Supabase (Postgres). Tables, unique constraints and the
RPC functions used for multi-record writes are in database/schema.sql.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from app.config import get_settings
from app.club.errors import ConflictError, TransportError
from app.club.models import (
    Attendance,
    ClubColors,
    ClubSettings,
    Coach,
    Player,
    PlayerStats,
    StatsRecord,
    Team,
)
from app.club.terminology import AttendanceStatus

from .store import ClubStore

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

PLAYER_SELECT = "*, player_stats(*)"
TEAM_SELECT = "*, team_players(player_id)"


# 싱글톤 클라이언트
_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Supabase 클라이언트 인스턴스 반환 (싱글톤)
    """
    global _supabase_client
    if _supabase_client is None:
        settings = get_settings()
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise ValueError("SUPABASE_URL과 SUPABASE_KEY 환경변수를 설정해주세요")
        _supabase_client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            options=ClientOptions(postgrest_client_timeout=settings.STORE_TIMEOUT_SECONDS),
        )
    return _supabase_client


# ==================== Row mapping ====================

def _stats_row(player_id: str, record: StatsRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "player_id": player_id,
        "date": record.date.isoformat(),
        "attack": record.stats.attack,
        "defense": record.stats.defense,
        "block": record.stats.block,
        "pass": record.stats.pass_,
    }


def _player_row(player: Player) -> Dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "document": player.document,
        "address": player.address,
        "phone": player.phone,
        "join_date": player.join_date.isoformat(),
        "birth_date": player.birth_date.isoformat(),
        "avatar_url": player.avatar_url,
        "main_categories": [c.value for c in player.main_categories],
        "sub_category": player.sub_category.value,
        "position": player.position.value,
        "last_payment_date": (
            player.last_payment_date.isoformat() if player.last_payment_date else None
        ),
    }


def _player_from_row(row: Dict[str, Any]) -> Player:
    history = [
        StatsRecord(
            id=s["id"],
            date=s["date"],
            stats=PlayerStats(
                attack=s["attack"],
                defense=s["defense"],
                block=s["block"],
                pass_=s["pass"],
            ),
        )
        for s in (row.get("player_stats") or [])
    ]
    history.sort(key=lambda r: (r.date, r.id), reverse=True)
    return Player(
        id=row["id"],
        name=row["name"],
        document=row["document"],
        address=row["address"],
        phone=row["phone"],
        join_date=row["join_date"],
        birth_date=row["birth_date"],
        avatar_url=row.get("avatar_url") or "",
        main_categories=row["main_categories"],
        sub_category=row["sub_category"],
        position=row["position"],
        stats_history=history,
        last_payment_date=row.get("last_payment_date"),
    )


def _team_row(team: Team) -> Dict[str, Any]:
    return {
        "id": team.id,
        "name": team.name,
        "main_category": team.main_category.value,
        "sub_category": team.sub_category.value,
        "tournament": team.tournament,
        "tournament_position": team.tournament_position,
        "coach_id": team.coach_id,
    }


def _team_from_row(row: Dict[str, Any]) -> Team:
    return Team(
        id=row["id"],
        name=row["name"],
        main_category=row["main_category"],
        sub_category=row["sub_category"],
        player_ids=[m["player_id"] for m in (row.get("team_players") or [])],
        tournament=row.get("tournament"),
        tournament_position=row.get("tournament_position"),
        coach_id=row.get("coach_id"),
    )


def _attendance_from_row(row: Dict[str, Any]) -> Attendance:
    return Attendance(
        id=str(row["id"]),
        player_id=row["player_id"],
        # timestamp columns come back as full ISO strings; keep the day only
        date=str(row["date"])[:10],
        status=row["status"],
    )


def _coach_from_row(row: Dict[str, Any]) -> Coach:
    return Coach(
        id=row["id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        document=row["document"],
        avatar_url=row.get("avatar_url") or "",
    )


def _settings_row(settings: ClubSettings) -> Dict[str, Any]:
    colors = settings.colors
    return {
        "id": settings.id,
        "name": settings.name,
        "logo_url": settings.logo_url,
        "primary_color": colors.primary,
        "secondary_color": colors.secondary,
        "tertiary_color": colors.tertiary,
        "background_color": colors.background,
        "surface_color": colors.surface,
        "text_primary_color": colors.text_primary,
        "text_secondary_color": colors.text_secondary,
        "team_creation_enabled": settings.team_creation_enabled,
        "monthly_payment_enabled": settings.monthly_payment_enabled,
    }


def _settings_from_row(row: Dict[str, Any]) -> ClubSettings:
    return ClubSettings(
        id=row["id"],
        name=row["name"],
        logo_url=row["logo_url"],
        colors=ClubColors(
            primary=row["primary_color"],
            secondary=row["secondary_color"],
            tertiary=row["tertiary_color"],
            background=row["background_color"],
            surface=row["surface_color"],
            text_primary=row["text_primary_color"],
            text_secondary=row["text_secondary_color"],
        ),
        team_creation_enabled=row["team_creation_enabled"],
        monthly_payment_enabled=row["monthly_payment_enabled"],
    )


class SupabaseClubStore(ClubStore):
    """Supabase 기반 ClubStore"""

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or get_supabase_client()

    def _fail(self, operation: str, error: Exception, field: str = "document", value: Any = None):
        """Translate a driver error; always raises"""
        if isinstance(error, APIError) and error.code == UNIQUE_VIOLATION:
            logger.warning(f"{operation}: unique violation on {field}")
            raise ConflictError(field, value)
        logger.error(f"{operation} 오류: {error}")
        raise TransportError(operation, error)

    # ==================== 선수 ====================

    async def list_players(self) -> List[Player]:
        try:
            result = self.client.table("players").select(PLAYER_SELECT).order(
                "join_date", desc=True
            ).execute()
        except Exception as e:
            self._fail("list_players", e)
        return [_player_from_row(row) for row in (result.data or [])]

    async def _get_player_where(self, column: str, value: str, operation: str) -> Optional[Player]:
        try:
            result = self.client.table("players").select(PLAYER_SELECT).eq(
                column, value
            ).limit(1).execute()
        except Exception as e:
            self._fail(operation, e)
        if result.data:
            return _player_from_row(result.data[0])
        return None

    async def get_player(self, player_id: str) -> Optional[Player]:
        return await self._get_player_where("id", player_id, "get_player")

    async def get_player_by_document(self, document: str) -> Optional[Player]:
        return await self._get_player_where("document", document, "get_player_by_document")

    async def create_player(self, player: Player) -> Player:
        try:
            self.client.rpc("create_player_with_stats", {
                "p_player": _player_row(player),
                "p_stats": [_stats_row(player.id, r) for r in player.stats_history],
            }).execute()
        except Exception as e:
            self._fail("create_player", e, value=player.document)
        return await self.get_player(player.id)

    async def update_player(
        self,
        player: Player,
        edited_record_id: Optional[str] = None,
        edited_stats: Optional[PlayerStats] = None,
    ) -> Optional[Player]:
        row = _player_row(player)
        row.pop("join_date")
        stats = None
        if edited_record_id is not None and edited_stats is not None:
            stats = {
                "id": edited_record_id,
                "attack": edited_stats.attack,
                "defense": edited_stats.defense,
                "block": edited_stats.block,
                "pass": edited_stats.pass_,
            }
        try:
            result = self.client.rpc("update_player_with_stats", {
                "p_player": row,
                "p_stats": stats,
            }).execute()
        except Exception as e:
            self._fail("update_player", e, value=player.document)
        if not result.data:
            return None
        return await self.get_player(player.id)

    async def add_stats_record(self, player_id: str, record: StatsRecord) -> Optional[Player]:
        try:
            self.client.table("player_stats").insert(_stats_row(player_id, record)).execute()
        except Exception as e:
            self._fail("add_stats_record", e)
        return await self.get_player(player_id)

    async def set_last_payment(self, player_id: str, paid_at: datetime) -> Optional[Player]:
        try:
            result = self.client.table("players").update({
                "last_payment_date": paid_at.isoformat()
            }).eq("id", player_id).execute()
        except Exception as e:
            self._fail("set_last_payment", e)
        if not result.data:
            return None
        return await self.get_player(player_id)

    async def delete_player(self, player_id: str) -> bool:
        # player_stats, attendances, team_players cascade on the foreign keys
        try:
            result = self.client.table("players").delete().eq("id", player_id).execute()
        except Exception as e:
            self._fail("delete_player", e)
        return len(result.data or []) > 0

    # ==================== 팀 ====================

    async def list_teams(self) -> List[Team]:
        try:
            result = self.client.table("teams").select(TEAM_SELECT).execute()
        except Exception as e:
            self._fail("list_teams", e)
        return [_team_from_row(row) for row in (result.data or [])]

    async def get_team(self, team_id: str) -> Optional[Team]:
        try:
            result = self.client.table("teams").select(TEAM_SELECT).eq(
                "id", team_id
            ).limit(1).execute()
        except Exception as e:
            self._fail("get_team", e)
        if result.data:
            return _team_from_row(result.data[0])
        return None

    async def list_teams_for_player(self, player_id: str) -> List[Team]:
        try:
            memberships = self.client.table("team_players").select("team_id").eq(
                "player_id", player_id
            ).execute()
            team_ids = [m["team_id"] for m in (memberships.data or [])]
            if not team_ids:
                return []
            result = self.client.table("teams").select(TEAM_SELECT).in_(
                "id", team_ids
            ).execute()
        except Exception as e:
            self._fail("list_teams_for_player", e)
        return [_team_from_row(row) for row in (result.data or [])]

    async def create_team(self, team: Team) -> Team:
        try:
            self.client.rpc("create_team_with_players", {
                "p_team": _team_row(team),
                "p_player_ids": list(team.player_ids),
            }).execute()
        except Exception as e:
            self._fail("create_team", e, field="id", value=team.id)
        return await self.get_team(team.id)

    async def update_team(self, team: Team) -> Optional[Team]:
        row = _team_row(team)
        # category columns are fixed at creation
        row.pop("main_category")
        row.pop("sub_category")
        try:
            result = self.client.rpc("update_team_with_players", {
                "p_team": row,
                "p_player_ids": list(team.player_ids),
            }).execute()
        except Exception as e:
            self._fail("update_team", e, field="id", value=team.id)
        if not result.data:
            return None
        return await self.get_team(team.id)

    # ==================== 출석 ====================

    async def list_attendances(self, player_id: Optional[str] = None) -> List[Attendance]:
        try:
            query = self.client.table("attendances").select("*")
            if player_id is not None:
                query = query.eq("player_id", player_id).order("date", desc=True)
            result = query.execute()
        except Exception as e:
            self._fail("list_attendances", e)
        return [_attendance_from_row(row) for row in (result.data or [])]

    async def upsert_attendance(
        self,
        player_id: str,
        day: date,
        status: AttendanceStatus,
    ) -> Attendance:
        try:
            result = self.client.table("attendances").upsert(
                {"player_id": player_id, "date": day.isoformat(), "status": status.value},
                on_conflict="player_id,date",
            ).execute()
        except Exception as e:
            self._fail("upsert_attendance", e)
        return _attendance_from_row(result.data[0])

    # ==================== 코치 ====================

    async def list_coaches(self) -> List[Coach]:
        try:
            result = self.client.table("coaches").select("*").execute()
        except Exception as e:
            self._fail("list_coaches", e)
        return [_coach_from_row(row) for row in (result.data or [])]

    async def get_coach(self, coach_id: str) -> Optional[Coach]:
        try:
            result = self.client.table("coaches").select("*").eq(
                "id", coach_id
            ).limit(1).execute()
        except Exception as e:
            self._fail("get_coach", e)
        if result.data:
            return _coach_from_row(result.data[0])
        return None

    async def get_coach_by_document(self, document: str) -> Optional[Coach]:
        try:
            result = self.client.table("coaches").select("*").eq(
                "document", document
            ).limit(1).execute()
        except Exception as e:
            self._fail("get_coach_by_document", e)
        if result.data:
            return _coach_from_row(result.data[0])
        return None

    async def create_coach(self, coach: Coach) -> Coach:
        try:
            result = self.client.table("coaches").insert({
                "id": coach.id,
                "first_name": coach.first_name,
                "last_name": coach.last_name,
                "document": coach.document,
                "avatar_url": coach.avatar_url,
            }).execute()
        except Exception as e:
            self._fail("create_coach", e, value=coach.document)
        return _coach_from_row(result.data[0])

    # ==================== 클럽 설정 ====================

    async def get_or_create_settings(self, defaults: ClubSettings) -> ClubSettings:
        try:
            # no-op when the row exists
            self.client.table("club_settings").upsert(
                _settings_row(defaults),
                on_conflict="id",
                ignore_duplicates=True,
            ).execute()
            result = self.client.table("club_settings").select("*").eq(
                "id", defaults.id
            ).limit(1).execute()
        except Exception as e:
            self._fail("get_or_create_settings", e)
        return _settings_from_row(result.data[0])

    async def save_settings(self, settings: ClubSettings) -> ClubSettings:
        try:
            result = self.client.table("club_settings").upsert(
                _settings_row(settings),
                on_conflict="id",
            ).execute()
        except Exception as e:
            self._fail("save_settings", e)
        return _settings_from_row(result.data[0])
