"""
Entity store interface

Storage contract used by ClubService. Every method is a single atomic
operation against the backing store: multi-record writes (player + seed
stats, team + membership, player delete + cascades) must either fully apply
or have no effect. Implementations raise app.club.errors.ConflictError on a
unique-key clash and TransportError when the store is unreachable.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional

from app.club.models import (
    Attendance,
    ClubSettings,
    Coach,
    Player,
    PlayerStats,
    StatsRecord,
    Team,
)
from app.club.terminology import AttendanceStatus


class ClubStore(ABC):
    """Persistence for players, teams, attendance, coaches and club settings"""

    # ==================== 선수 ====================

    @abstractmethod
    async def list_players(self) -> List[Player]:
        """All players, newest join date first"""

    @abstractmethod
    async def get_player(self, player_id: str) -> Optional[Player]:
        ...

    @abstractmethod
    async def get_player_by_document(self, document: str) -> Optional[Player]:
        ...

    @abstractmethod
    async def create_player(self, player: Player) -> Player:
        """Insert the player together with its stats history"""

    @abstractmethod
    async def update_player(
        self,
        player: Player,
        edited_record_id: Optional[str] = None,
        edited_stats: Optional[PlayerStats] = None,
    ) -> Optional[Player]:
        """
        Replace the player's editable fields and, when given, the stats of
        one existing record. Returns None when the player does not exist.
        """

    @abstractmethod
    async def add_stats_record(self, player_id: str, record: StatsRecord) -> Optional[Player]:
        ...

    @abstractmethod
    async def set_last_payment(self, player_id: str, paid_at: datetime) -> Optional[Player]:
        ...

    @abstractmethod
    async def delete_player(self, player_id: str) -> bool:
        """Delete the player, its stats, its attendance and its team memberships"""

    # ==================== 팀 ====================

    @abstractmethod
    async def list_teams(self) -> List[Team]:
        ...

    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        ...

    @abstractmethod
    async def list_teams_for_player(self, player_id: str) -> List[Team]:
        ...

    @abstractmethod
    async def create_team(self, team: Team) -> Team:
        """Insert the team and its membership set"""

    @abstractmethod
    async def update_team(self, team: Team) -> Optional[Team]:
        """Replace name/tournament/coach and reset the membership set"""

    # ==================== 출석 ====================

    @abstractmethod
    async def list_attendances(self, player_id: Optional[str] = None) -> List[Attendance]:
        """All records, or one player's records newest first"""

    @abstractmethod
    async def upsert_attendance(
        self,
        player_id: str,
        day: date,
        status: AttendanceStatus,
    ) -> Attendance:
        """Insert or overwrite the (player_id, day) record; last writer wins"""

    # ==================== 코치 ====================

    @abstractmethod
    async def list_coaches(self) -> List[Coach]:
        ...

    @abstractmethod
    async def get_coach(self, coach_id: str) -> Optional[Coach]:
        ...

    @abstractmethod
    async def get_coach_by_document(self, document: str) -> Optional[Coach]:
        ...

    @abstractmethod
    async def create_coach(self, coach: Coach) -> Coach:
        ...

    # ==================== 클럽 설정 ====================

    @abstractmethod
    async def get_or_create_settings(self, defaults: ClubSettings) -> ClubSettings:
        """Return the singleton, persisting `defaults` first when absent"""

    @abstractmethod
    async def save_settings(self, settings: ClubSettings) -> ClubSettings:
        """Replace the singleton's editable fields"""
