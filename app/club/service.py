"""
Club Service

Use cases of the club manager. Each method reads what it needs from the
entity store, applies the rules in rules.py and performs at most one store
write. Domain errors from errors.py propagate to the HTTP boundary.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional

from loguru import logger

from database.store import ClubStore

from . import rules
from .errors import ConflictError, NotFoundError, ValidationError
from .models import (
    Attendance,
    AttendanceSheetEntry,
    AverageStats,
    ClubSettings,
    ClubSettingsData,
    Coach,
    CoachCreate,
    DashboardSummary,
    MonthlyJoinBucket,
    OverdueEntry,
    OverdueStatus,
    Player,
    PlayerCreate,
    PlayerStats,
    PlayerUpdate,
    StatsRecord,
    Team,
    TeamCandidate,
    TeamCreate,
    TeamGroup,
    TeamUpdate,
    TopAthlete,
    TournamentGroup,
    CLUB_SETTINGS_ID,
    as_utc,
    default_club_settings,
)
from .terminology import AttendanceStatus, MainCategory, SubCategory


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ClubService:
    """클럽 관리 서비스"""

    def __init__(self, store: ClubStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def _now(self) -> datetime:
        return as_utc(self.clock())

    # =============================================
    # 선수
    # =============================================

    async def list_players(self) -> List[Player]:
        return await self.store.list_players()

    async def get_player(self, player_id: str) -> Player:
        player = await self.store.get_player(player_id)
        if player is None:
            raise NotFoundError("Player", player_id)
        return player

    async def get_player_by_document(self, document: str) -> Player:
        player = await self.store.get_player_by_document(document)
        if player is None:
            raise NotFoundError("Player", document, field="document")
        return player

    async def filter_players(
        self,
        main_category: Optional[MainCategory] = None,
        sub_category: Optional[SubCategory] = None,
    ) -> List[Player]:
        """Players of a category / level (None = all)"""
        players = await self.store.list_players()
        return rules.filter_players(players, main_category, sub_category)

    async def create_player(self, data: PlayerCreate) -> Player:
        """
        선수 등록

        join date is set here; the stats history is seeded with the supplied
        records, or one record of the initial stats dated now.
        """
        if await self.store.get_player_by_document(data.document) is not None:
            logger.warning(f"Duplicate player document rejected: {data.document}")
            raise ConflictError("document", data.document)

        now = self._now()
        if data.stats_history:
            history = [
                StatsRecord(id=new_id(), date=record.date or now, stats=record.stats)
                for record in data.stats_history
            ]
        else:
            history = [StatsRecord(id=new_id(), date=now, stats=data.initial_stats)]

        player = Player(
            id=new_id(),
            name=data.name,
            document=data.document,
            address=data.address,
            phone=data.phone,
            join_date=now,
            birth_date=data.birth_date,
            avatar_url=data.avatar_url,
            main_categories=data.main_categories,
            sub_category=data.sub_category,
            position=data.position,
            stats_history=history,
        )
        created = await self.store.create_player(player)
        logger.info(f"Player registered: {created.id} ({created.name})")
        return created

    async def update_player(self, player_id: str, data: PlayerUpdate) -> Player:
        """
        선수 수정

        Replaces the editable fields. join date never changes; latest_stats,
        when given, edits the newest stats record in place.
        """
        current = await self.get_player(player_id)

        if data.document != current.document:
            other = await self.store.get_player_by_document(data.document)
            if other is not None and other.id != player_id:
                raise ConflictError("document", data.document)

        edited_record_id = None
        if data.latest_stats is not None:
            newest = rules.latest_record(current)
            if newest is None:
                raise ValidationError("latestStats", "player has no stats record to edit")
            edited_record_id = newest.id

        player = current.model_copy(update={
            "name": data.name,
            "document": data.document,
            "address": data.address,
            "phone": data.phone,
            "birth_date": data.birth_date,
            "avatar_url": data.avatar_url,
            "main_categories": data.main_categories,
            "sub_category": data.sub_category,
            "position": data.position,
            "last_payment_date": data.last_payment_date,
        })
        updated = await self.store.update_player(player, edited_record_id, data.latest_stats)
        if updated is None:
            raise NotFoundError("Player", player_id)
        logger.info(f"Player updated: {player_id}")
        return updated

    async def add_stats_record(self, player_id: str, stats: PlayerStats) -> Player:
        """New assessment dated now"""
        await self.get_player(player_id)
        record = StatsRecord(id=new_id(), date=self._now(), stats=stats)
        updated = await self.store.add_stats_record(player_id, record)
        if updated is None:
            raise NotFoundError("Player", player_id)
        logger.info(f"Stats record added: {player_id}")
        return updated

    async def record_payment(self, player_id: str, now: Optional[datetime] = None) -> Player:
        """Monthly fee paid (default: now)"""
        paid_at = as_utc(now) if now is not None else self._now()
        updated = await self.store.set_last_payment(player_id, paid_at)
        if updated is None:
            raise NotFoundError("Player", player_id)
        logger.info(f"Payment recorded: {player_id}")
        return updated

    async def delete_player(self, player_id: str) -> None:
        """Delete a player with its stats, attendance and team memberships"""
        if not await self.store.delete_player(player_id):
            raise NotFoundError("Player", player_id)
        logger.info(f"Player deleted: {player_id}")

    async def player_overdue(self, player_id: str) -> OverdueStatus:
        player = await self.get_player(player_id)
        months = rules.player_overdue_months(player, self._now())
        return OverdueStatus(
            player_id=player.id,
            months=months,
            expellable=rules.can_expel(months),
        )

    async def expel_player(self, player_id: str, confirm: bool) -> None:
        """
        선수 퇴출

        Irreversible delete of a player owing at least
        EXPEL_THRESHOLD_MONTHS months. The caller must confirm explicitly.
        """
        if not confirm:
            raise ValidationError("confirm", "expelling a player cannot be undone; confirm=true is required")

        settings = await self.get_settings()
        if not settings.monthly_payment_enabled:
            raise ValidationError("monthlyPaymentEnabled", "monthly payments are disabled for this club")

        status = await self.player_overdue(player_id)
        if not status.expellable:
            logger.warning(f"Expel refused for {player_id}: {status.months} month(s) overdue")
            raise ValidationError(
                "months",
                f"a player can be expelled after {rules.EXPEL_THRESHOLD_MONTHS} overdue months "
                f"(owes {status.months})",
            )

        await self.delete_player(player_id)
        logger.info(f"Player expelled: {player_id} ({status.months} months overdue)")

    async def peer_average(self, player_id: str) -> Optional[AverageStats]:
        player = await self.get_player(player_id)
        players = await self.store.list_players()
        return rules.peer_average_stats(player, players)

    async def stats_history(self, player_id: str, range_name: str = "quarterly") -> List[StatsRecord]:
        player = await self.get_player(player_id)
        return rules.stats_history_window(player, range_name, self._now())

    # =============================================
    # 팀
    # =============================================

    async def list_teams(self) -> List[Team]:
        return await self.store.list_teams()

    async def get_team(self, team_id: str) -> Team:
        team = await self.store.get_team(team_id)
        if team is None:
            raise NotFoundError("Team", team_id)
        return team

    async def list_teams_for_player(self, player_id: str) -> List[Team]:
        await self.get_player(player_id)
        return await self.store.list_teams_for_player(player_id)

    async def teams_by_sub_category(self) -> List[TeamGroup]:
        teams = await self.store.list_teams()
        return rules.group_teams_by_sub_category(teams)

    async def _check_roster(
        self,
        player_ids: List[str],
        main_category: MainCategory,
        exclude_team_id: Optional[str] = None,
    ) -> None:
        rules.validate_roster(player_ids)

        players_by_id: Dict[str, Player] = {
            p.id: p for p in await self.store.list_players()
        }
        missing = [pid for pid in player_ids if pid not in players_by_id]
        if missing:
            raise NotFoundError("Player", ", ".join(missing), field="playerIds")

        teams = await self.store.list_teams()
        ineligible = rules.ineligible_roster_ids(
            player_ids, players_by_id, teams, main_category, exclude_team_id
        )
        if ineligible:
            raise ValidationError(
                "playerIds",
                f"players not eligible for a {main_category.value} team: {', '.join(ineligible)}",
            )

    async def _check_coach(self, coach_id: Optional[str]) -> None:
        if coach_id is not None and await self.store.get_coach(coach_id) is None:
            raise NotFoundError("Coach", coach_id, field="coachId")

    async def create_team(self, data: TeamCreate) -> Team:
        """
        팀 생성

        Checks the creation flag, the category table, roster size and each
        player's eligibility, then writes the team and its membership at once.
        """
        settings = await self.get_settings()
        if not settings.team_creation_enabled:
            raise ValidationError("teamCreationEnabled", "team creation is disabled for this club")

        rules.validate_category_pair(data.main_category, data.sub_category)
        await self._check_roster(data.player_ids, data.main_category)
        await self._check_coach(data.coach_id)

        team = Team(
            id=new_id(),
            name=data.name,
            main_category=data.main_category,
            sub_category=data.sub_category,
            player_ids=list(data.player_ids),
            tournament=data.tournament,
            tournament_position=data.tournament_position,
            coach_id=data.coach_id,
        )
        created = await self.store.create_team(team)
        logger.info(f"Team created: {created.id} ({created.name}, {len(created.player_ids)} players)")
        return created

    async def update_team(self, team_id: str, data: TeamUpdate) -> Team:
        """
        팀 수정

        Only name, tournament, tournament position, coach and roster change;
        main/sub category stay as created.
        """
        current = await self.get_team(team_id)
        provided = data.model_fields_set
        changes = {}

        if "name" in provided and data.name is not None:
            changes["name"] = data.name
        for field in ("tournament", "tournament_position", "coach_id"):
            if field in provided:
                changes[field] = getattr(data, field)
        if "coach_id" in changes:
            await self._check_coach(changes["coach_id"])
        if "player_ids" in provided and data.player_ids is not None:
            await self._check_roster(data.player_ids, current.main_category, exclude_team_id=team_id)
            changes["player_ids"] = list(data.player_ids)

        updated = await self.store.update_team(current.model_copy(update=changes))
        if updated is None:
            raise NotFoundError("Team", team_id)
        logger.info(f"Team updated: {team_id} ({', '.join(sorted(changes)) or 'no changes'})")
        return updated

    async def team_candidates(
        self,
        main_category: Optional[MainCategory],
        team_id: Optional[str] = None,
    ) -> List[TeamCandidate]:
        """
        Eligible players for a roster. Creating (no team_id): most attended
        first. Editing: highest total score first.
        """
        if team_id is not None:
            team = await self.get_team(team_id)
            main_category = team.main_category
        elif main_category is None:
            raise ValidationError("mainCategory", "a main category is required for a new team")

        players = await self.store.list_players()
        teams = await self.store.list_teams()
        attendances = await self.store.list_attendances()

        candidates = rules.eligible_players(players, teams, main_category, exclude_team_id=team_id)
        if team_id is None:
            ordered = rules.order_candidates_for_creation(candidates, attendances)
        else:
            ordered = rules.order_candidates_for_edit(candidates)

        counts = rules.attendance_counts(attendances)
        return [
            TeamCandidate(
                player_id=player.id,
                name=player.name,
                avatar_url=player.avatar_url,
                total_score=rules.total_score(player),
                attendance_count=counts.get(player.id, 0),
            )
            for player in ordered
        ]

    # =============================================
    # 출석
    # =============================================

    async def list_attendances(self) -> List[Attendance]:
        return await self.store.list_attendances()

    async def list_attendances_for_player(self, player_id: str) -> List[Attendance]:
        await self.get_player(player_id)
        return await self.store.list_attendances(player_id)

    async def record_attendance(
        self,
        player_id: str,
        status: AttendanceStatus,
        today: Optional[datetime] = None,
    ) -> Attendance:
        """
        출석 기록

        One record per player per calendar day; a second call on the same
        day overwrites the status.
        """
        await self.get_player(player_id)
        day = rules.as_date(today if today is not None else self._now())
        record = await self.store.upsert_attendance(player_id, day, status)
        logger.info(f"Attendance {status.value}: {player_id} on {day.isoformat()}")
        return record

    async def attendance_status(self, player_id: str, day: Optional[date] = None) -> str:
        """Presente / Ausente / Pending"""
        target = day if day is not None else self._now()
        attendances = await self.store.list_attendances(player_id)
        return rules.status_for(attendances, player_id, target)

    async def attendance_sheet(
        self,
        day: Optional[date] = None,
        main_category: Optional[MainCategory] = None,
        sub_category: Optional[SubCategory] = None,
    ) -> List[AttendanceSheetEntry]:
        """Every (filtered) player with the day's resolved status"""
        target = rules.as_date(day if day is not None else self._now())
        players = rules.filter_players(
            await self.store.list_players(), main_category, sub_category
        )
        attendances = [
            a for a in await self.store.list_attendances() if a.date == target
        ]
        return [
            AttendanceSheetEntry(
                player_id=player.id,
                name=player.name,
                avatar_url=player.avatar_url,
                status=rules.status_for(attendances, player.id, target),
            )
            for player in players
        ]

    # =============================================
    # 코치
    # =============================================

    async def list_coaches(self) -> List[Coach]:
        return await self.store.list_coaches()

    async def get_coach_by_document(self, document: str) -> Optional[Coach]:
        return await self.store.get_coach_by_document(document)

    async def create_coach(self, data: CoachCreate) -> Coach:
        if await self.store.get_coach_by_document(data.document) is not None:
            logger.warning(f"Duplicate coach document rejected: {data.document}")
            raise ConflictError("document", data.document)
        coach = Coach(
            id=new_id(),
            first_name=data.first_name,
            last_name=data.last_name,
            document=data.document,
            avatar_url=data.avatar_url,
        )
        created = await self.store.create_coach(coach)
        logger.info(f"Coach registered: {created.id} ({created.first_name} {created.last_name})")
        return created

    # =============================================
    # 클럽 설정
    # =============================================

    async def get_settings(self) -> ClubSettings:
        return await self.store.get_or_create_settings(default_club_settings())

    async def update_settings(self, data: ClubSettingsData) -> ClubSettings:
        """Full replacement of the editable settings"""
        await self.get_settings()
        settings = ClubSettings(id=CLUB_SETTINGS_ID, **data.model_dump())
        saved = await self.store.save_settings(settings)
        logger.info(
            f"Club settings updated: teamCreation={saved.team_creation_enabled}, "
            f"monthlyPayment={saved.monthly_payment_enabled}"
        )
        return saved

    # =============================================
    # 대시보드
    # =============================================

    async def dashboard_summary(self) -> DashboardSummary:
        players = await self.store.list_players()
        teams = await self.store.list_teams()
        attendances = await self.store.list_attendances()
        return rules.dashboard_summary(players, teams, attendances, self._now())

    async def top_athletes(self, limit: int = rules.TOP_ATHLETES_LIMIT) -> List[TopAthlete]:
        players = await self.store.list_players()
        return rules.top_athletes(players, limit)

    async def monthly_joins(self) -> List[MonthlyJoinBucket]:
        players = await self.store.list_players()
        return [
            MonthlyJoinBucket(month=label, count=count)
            for label, count in rules.monthly_join_counts(players, self._now())
        ]

    async def tournaments(self) -> List[TournamentGroup]:
        teams = await self.store.list_teams()
        return [
            TournamentGroup(tournament=name, teams=group)
            for name, group in rules.tournament_groups(teams).items()
        ]

    async def overdue_payments(self) -> List[OverdueEntry]:
        """Empty when the club does not charge monthly fees"""
        settings = await self.get_settings()
        if not settings.monthly_payment_enabled:
            return []
        players = await self.store.list_players()
        return rules.overdue_report(players, self._now())
