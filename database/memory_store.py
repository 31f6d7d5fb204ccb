"""
In-memory entity store

Development and test backend. One re-entrant lock serializes every
operation, so each call is atomic with respect to concurrent requests.
Records are copied on the way in and out; callers never share state with
the store.
"""
import threading
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from loguru import logger

from app.club.errors import ConflictError
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

from .store import ClubStore


class InMemoryClubStore(ClubStore):
    """Dictionary-backed ClubStore"""

    def __init__(self):
        self._lock = threading.RLock()
        self._players: Dict[str, Player] = {}
        self._teams: Dict[str, Team] = {}
        self._attendances: Dict[Tuple[str, date], Attendance] = {}
        self._coaches: Dict[str, Coach] = {}
        self._settings: Optional[ClubSettings] = None
        logger.info("In-memory club store ready")

    @staticmethod
    def _copy(record):
        return record.model_copy(deep=True) if record is not None else None

    @staticmethod
    def _sort_history(player: Player) -> None:
        """Newest stats record first"""
        player.stats_history.sort(key=lambda r: (r.date, r.id), reverse=True)

    # ==================== 선수 ====================

    async def list_players(self) -> List[Player]:
        with self._lock:
            players = [self._copy(p) for p in self._players.values()]
        players.sort(key=lambda p: p.join_date, reverse=True)
        return players

    async def get_player(self, player_id: str) -> Optional[Player]:
        with self._lock:
            return self._copy(self._players.get(player_id))

    async def get_player_by_document(self, document: str) -> Optional[Player]:
        with self._lock:
            for player in self._players.values():
                if player.document == document:
                    return self._copy(player)
        return None

    def _check_document(self, document: str, player_id: str) -> None:
        for other in self._players.values():
            if other.document == document and other.id != player_id:
                raise ConflictError("document", document)

    async def create_player(self, player: Player) -> Player:
        with self._lock:
            if player.id in self._players:
                raise ConflictError("id", player.id)
            self._check_document(player.document, player.id)
            stored = self._copy(player)
            self._sort_history(stored)
            self._players[player.id] = stored
            return self._copy(stored)

    async def update_player(
        self,
        player: Player,
        edited_record_id: Optional[str] = None,
        edited_stats: Optional[PlayerStats] = None,
    ) -> Optional[Player]:
        with self._lock:
            current = self._players.get(player.id)
            if current is None:
                return None
            self._check_document(player.document, player.id)

            history = [r.model_copy(deep=True) for r in current.stats_history]
            if edited_record_id is not None and edited_stats is not None:
                for record in history:
                    if record.id == edited_record_id:
                        record.stats = edited_stats.model_copy()

            updated = player.model_copy(deep=True, update={
                "join_date": current.join_date,
                "stats_history": history,
            })
            self._players[player.id] = updated
            return self._copy(updated)

    async def add_stats_record(self, player_id: str, record: StatsRecord) -> Optional[Player]:
        with self._lock:
            current = self._players.get(player_id)
            if current is None:
                return None
            current.stats_history.append(record.model_copy(deep=True))
            self._sort_history(current)
            return self._copy(current)

    async def set_last_payment(self, player_id: str, paid_at: datetime) -> Optional[Player]:
        with self._lock:
            current = self._players.get(player_id)
            if current is None:
                return None
            current.last_payment_date = paid_at
            return self._copy(current)

    async def delete_player(self, player_id: str) -> bool:
        with self._lock:
            if self._players.pop(player_id, None) is None:
                return False
            for key in [k for k in self._attendances if k[0] == player_id]:
                del self._attendances[key]
            for team in self._teams.values():
                if player_id in team.player_ids:
                    team.player_ids = [pid for pid in team.player_ids if pid != player_id]
            return True

    # ==================== 팀 ====================

    async def list_teams(self) -> List[Team]:
        with self._lock:
            return [self._copy(t) for t in self._teams.values()]

    async def get_team(self, team_id: str) -> Optional[Team]:
        with self._lock:
            return self._copy(self._teams.get(team_id))

    async def list_teams_for_player(self, player_id: str) -> List[Team]:
        with self._lock:
            return [
                self._copy(t) for t in self._teams.values()
                if player_id in t.player_ids
            ]

    async def create_team(self, team: Team) -> Team:
        with self._lock:
            if team.id in self._teams:
                raise ConflictError("id", team.id)
            self._teams[team.id] = self._copy(team)
            return self._copy(team)

    async def update_team(self, team: Team) -> Optional[Team]:
        with self._lock:
            current = self._teams.get(team.id)
            if current is None:
                return None
            updated = current.model_copy(deep=True, update={
                "name": team.name,
                "tournament": team.tournament,
                "tournament_position": team.tournament_position,
                "coach_id": team.coach_id,
                "player_ids": list(team.player_ids),
            })
            self._teams[team.id] = updated
            return self._copy(updated)

    # ==================== 출석 ====================

    async def list_attendances(self, player_id: Optional[str] = None) -> List[Attendance]:
        with self._lock:
            if player_id is None:
                return [self._copy(a) for a in self._attendances.values()]
            records = [
                self._copy(a) for (pid, _), a in self._attendances.items()
                if pid == player_id
            ]
        records.sort(key=lambda a: a.date, reverse=True)
        return records

    async def upsert_attendance(
        self,
        player_id: str,
        day: date,
        status: AttendanceStatus,
    ) -> Attendance:
        with self._lock:
            key = (player_id, day)
            existing = self._attendances.get(key)
            if existing is not None:
                existing.status = status
                return self._copy(existing)
            record = Attendance(
                id=str(uuid.uuid4()),
                player_id=player_id,
                date=day,
                status=status,
            )
            self._attendances[key] = record
            return self._copy(record)

    # ==================== 코치 ====================

    async def list_coaches(self) -> List[Coach]:
        with self._lock:
            return [self._copy(c) for c in self._coaches.values()]

    async def get_coach(self, coach_id: str) -> Optional[Coach]:
        with self._lock:
            return self._copy(self._coaches.get(coach_id))

    async def get_coach_by_document(self, document: str) -> Optional[Coach]:
        with self._lock:
            for coach in self._coaches.values():
                if coach.document == document:
                    return self._copy(coach)
        return None

    async def create_coach(self, coach: Coach) -> Coach:
        with self._lock:
            for other in self._coaches.values():
                if other.document == coach.document:
                    raise ConflictError("document", coach.document)
            self._coaches[coach.id] = self._copy(coach)
            return self._copy(coach)

    # ==================== 클럽 설정 ====================

    async def get_or_create_settings(self, defaults: ClubSettings) -> ClubSettings:
        with self._lock:
            if self._settings is None:
                self._settings = self._copy(defaults)
                logger.info("Club settings initialized with defaults")
            return self._copy(self._settings)

    async def save_settings(self, settings: ClubSettings) -> ClubSettings:
        with self._lock:
            self._settings = self._copy(settings)
            return self._copy(self._settings)
