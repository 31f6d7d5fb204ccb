"""
Club Service Tests - 서비스 유스케이스 테스트
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from app.club.errors import ConflictError, NotFoundError, ValidationError
from app.club.models import (
    ClubSettingsData,
    CoachCreate,
    PlayerStats,
    PlayerUpdate,
    StatsRecord,
    StatsRecordCreate,
    TeamCreate,
    TeamUpdate,
    default_club_settings,
)
from app.club import rules
from app.club.rules import RosterSizeError
from app.club.service import ClubService
from app.club.terminology import AttendanceStatus, MainCategory, SubCategory

from conftest import FIXED_NOW, make_player, make_record, player_create


async def register(service, count, prefix="p", main_categories=(MainCategory.Masculino,)):
    players = []
    for i in range(count):
        players.append(await service.create_player(
            player_create(f"{prefix}{i}", main_categories=main_categories)
        ))
    return [p.id for p in players]


def team_create(player_ids, main=MainCategory.Masculino, sub=SubCategory.Intermedio, **extra):
    return TeamCreate(name="Equipo", main_category=main, sub_category=sub, player_ids=player_ids, **extra)


async def disable_flags(service, team_creation=True, monthly_payment=True):
    data = default_club_settings().model_dump()
    data.pop("id")
    data["team_creation_enabled"] = team_creation
    data["monthly_payment_enabled"] = monthly_payment
    await service.update_settings(ClubSettingsData(**data))


class TestPlayerUseCases:
    """선수 등록/수정"""

    @pytest.mark.asyncio
    async def test_create_sets_join_date_and_seed_stats(self, service):
        player = await service.create_player(player_create("111"))
        assert player.join_date == FIXED_NOW
        assert len(player.stats_history) == 1
        assert player.stats_history[0].date == FIXED_NOW
        assert player.stats_history[0].stats.attack == 5

    @pytest.mark.asyncio
    async def test_create_with_supplied_history(self, service):
        history = [
            StatsRecordCreate(date=datetime(2024, 1, 1), stats=PlayerStats(attack=40)),
            StatsRecordCreate(stats=PlayerStats(attack=60)),
        ]
        player = await service.create_player(player_create("111", stats_history=history))
        assert [r.date for r in player.stats_history] == [FIXED_NOW, datetime(2024, 1, 1, tzinfo=timezone.utc)]

    @pytest.mark.asyncio
    async def test_duplicate_document(self, service):
        await service.create_player(player_create("111"))
        with pytest.raises(ConflictError) as exc_info:
            await service.create_player(player_create("111"))
        assert exc_info.value.field == "document"

    @pytest.mark.asyncio
    async def test_get_by_document(self, service):
        created = await service.create_player(player_create("111"))
        assert (await service.get_player_by_document("111")).id == created.id
        with pytest.raises(NotFoundError):
            await service.get_player_by_document("999")

    @pytest.mark.asyncio
    async def test_update_keeps_join_date_and_edits_latest(self, service, store):
        created = await store.create_player(make_player("p1", stats_history=[
            make_record("r1", datetime(2024, 1, 1), attack=5),
            make_record("r2", datetime(2024, 3, 1), attack=70),
        ]))

        body = PlayerUpdate(
            name="Otro Nombre",
            document="DOC-p1",
            address="Calle 2",
            phone="555",
            birth_date=date(2000, 1, 1),
            main_categories=[MainCategory.Mixto],
            sub_category=SubCategory.Avanzado,
            position="Líbero",
            latest_stats=PlayerStats(attack=80),
        )
        updated = await service.update_player(created.id, body)

        assert updated.join_date == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert updated.name == "Otro Nombre"
        assert len(updated.stats_history) == 2
        attacks = sorted(r.stats.attack for r in updated.stats_history)
        assert attacks == [5, 80]
        assert [r.id for r in updated.stats_history] == ["r2", "r1"]
        assert updated.stats_history[0].stats.attack == 80

    @pytest.mark.asyncio
    async def test_update_document_conflict(self, service):
        await service.create_player(player_create("111"))
        second = await service.create_player(player_create("222"))
        body = PlayerUpdate(
            name="X", document="111", address="A", phone="P", birth_date=date(2000, 1, 1),
            main_categories=[MainCategory.Masculino], sub_category=SubCategory.Intermedio,
            position="Colocador",
        )
        with pytest.raises(ConflictError):
            await service.update_player(second.id, body)

    @pytest.mark.asyncio
    async def test_update_missing_player(self, service):
        body = PlayerUpdate(
            name="X", document="1", address="A", phone="P", birth_date=date(2000, 1, 1),
            main_categories=[MainCategory.Masculino], sub_category=SubCategory.Intermedio,
            position="Colocador",
        )
        with pytest.raises(NotFoundError):
            await service.update_player("ghost", body)

    @pytest.mark.asyncio
    async def test_delete_removes_everything(self, service):
        """No orphan stats or attendance"""
        created = await service.create_player(player_create("111"))
        await service.record_attendance(created.id, AttendanceStatus.Presente)
        await service.delete_player(created.id)

        with pytest.raises(NotFoundError):
            await service.get_player(created.id)
        assert await service.list_attendances() == []
        with pytest.raises(NotFoundError):
            await service.delete_player(created.id)


class TestTimezones:
    """naive / aware 날짜 혼합"""

    @pytest.fixture
    def naive_service(self, store):
        return ClubService(store, clock=lambda: datetime(2024, 4, 20, 10, 30))

    @pytest.mark.asyncio
    async def test_supplied_utc_record_with_naive_clock(self, naive_service):
        history = [
            StatsRecordCreate.model_validate({"date": "2024-01-01T00:00:00Z", "stats": {"attack": 40}}),
            StatsRecordCreate.model_validate({"stats": {"attack": 60}}),
        ]
        player = await naive_service.create_player(player_create("111", stats_history=history))

        assert rules.latest_stats(player).attack == 60
        assert all(r.date.tzinfo is not None for r in player.stats_history)
        assert player.join_date == FIXED_NOW

    @pytest.mark.asyncio
    async def test_offset_record_then_new_assessment(self, naive_service, store):
        """+02:00 12:00 is 10:00 UTC, older than the 10:30 assessment"""
        await store.create_player(make_player("p1", stats_history=[
            StatsRecord.model_validate({
                "id": "r1",
                "date": "2024-04-20T12:00:00+02:00",
                "stats": {"attack": 90},
            }),
        ]))
        updated = await naive_service.add_stats_record("p1", PlayerStats(attack=10))

        assert rules.latest_stats(updated).attack == 10
        top = await naive_service.top_athletes()
        assert top[0].total_score == 10
        assert (await naive_service.peer_average("p1")) is None

    @pytest.mark.asyncio
    async def test_naive_payment_date(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        paid = await service.record_payment("p1", now=datetime(2024, 4, 2))
        assert paid.last_payment_date == datetime(2024, 4, 2, tzinfo=timezone.utc)
        assert (await service.player_overdue("p1")).months == 0

    @pytest.mark.asyncio
    async def test_default_clock_is_utc(self, store):
        player = await ClubService(store).create_player(player_create("111"))
        assert player.join_date.utcoffset() == timedelta(0)


class TestPaymentsAndExpel:
    """결제 및 퇴출"""

    @pytest.mark.asyncio
    async def test_payment_clears_debt(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        assert (await service.player_overdue("p1")).months == 4

        await service.record_payment("p1")
        status = await service.player_overdue("p1")
        assert status.months == 0
        assert not status.expellable

    @pytest.mark.asyncio
    async def test_expel_requires_confirmation(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        with pytest.raises(ValidationError) as exc_info:
            await service.expel_player("p1", confirm=False)
        assert exc_info.value.field == "confirm"
        assert await store.get_player("p1") is not None

    @pytest.mark.asyncio
    async def test_expel_requires_three_months(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2024, 2, 1)))
        with pytest.raises(ValidationError):
            await service.expel_player("p1", confirm=True)

    @pytest.mark.asyncio
    async def test_expel_deletes(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        await service.expel_player("p1", confirm=True)
        assert await store.get_player("p1") is None

    @pytest.mark.asyncio
    async def test_monthly_payment_disabled(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        await disable_flags(service, monthly_payment=False)
        assert await service.overdue_payments() == []
        with pytest.raises(ValidationError):
            await service.expel_player("p1", confirm=True)


class TestTeamUseCases:
    """팀 생성/수정"""

    @pytest.mark.asyncio
    async def test_create_team(self, service):
        ids = await register(service, 6)
        team = await service.create_team(team_create(ids, tournament="Copa"))
        assert team.player_ids == ids
        assert (await service.get_team(team.id)).tournament == "Copa"

    @pytest.mark.asyncio
    async def test_rejects_category_pair(self, service):
        ids = await register(service, 6, main_categories=(MainCategory.Femenino,))
        with pytest.raises(ValidationError) as exc_info:
            await service.create_team(team_create(ids, main=MainCategory.Femenino, sub=SubCategory.Avanzado))
        assert exc_info.value.field == "subCategory"

    @pytest.mark.asyncio
    async def test_rejects_roster_size(self, service):
        ids = await register(service, 5)
        with pytest.raises(RosterSizeError):
            await service.create_team(team_create(ids))

    @pytest.mark.asyncio
    async def test_rejects_unknown_player(self, service):
        ids = await register(service, 5)
        with pytest.raises(NotFoundError):
            await service.create_team(team_create(ids + ["ghost"]))

    @pytest.mark.asyncio
    async def test_one_team_per_main_category(self, service):
        """Second Masculino team refused; Mixto team allowed"""
        ids = await register(service, 6, main_categories=(MainCategory.Masculino, MainCategory.Mixto))
        await service.create_team(team_create(ids))

        with pytest.raises(ValidationError):
            await service.create_team(team_create(ids))

        mixed = await service.create_team(team_create(ids, main=MainCategory.Mixto, sub=SubCategory.Basico))
        assert len(await service.list_teams_for_player(ids[0])) == 2
        assert mixed.main_category == MainCategory.Mixto

    @pytest.mark.asyncio
    async def test_player_without_category_rejected(self, service):
        ids = await register(service, 6, main_categories=(MainCategory.Femenino,))
        with pytest.raises(ValidationError):
            await service.create_team(team_create(ids))

    @pytest.mark.asyncio
    async def test_team_creation_disabled(self, service):
        ids = await register(service, 6)
        await disable_flags(service, team_creation=False)
        with pytest.raises(ValidationError) as exc_info:
            await service.create_team(team_create(ids))
        assert exc_info.value.field == "teamCreationEnabled"

    @pytest.mark.asyncio
    async def test_update_keeps_own_members_eligible(self, service):
        ids = await register(service, 7)
        team = await service.create_team(team_create(ids[:6]))

        updated = await service.update_team(team.id, TeamUpdate(player_ids=ids[1:7], tournament="Liga"))
        assert updated.player_ids == ids[1:7]
        assert updated.tournament == "Liga"
        assert updated.name == "Equipo"
        assert updated.main_category == MainCategory.Masculino

    @pytest.mark.asyncio
    async def test_update_clears_tournament(self, service):
        ids = await register(service, 6)
        team = await service.create_team(team_create(ids, tournament="Copa"))
        updated = await service.update_team(team.id, TeamUpdate(tournament=None))
        assert updated.tournament is None
        assert updated.player_ids == ids

    @pytest.mark.asyncio
    async def test_update_missing_team(self, service):
        with pytest.raises(NotFoundError):
            await service.update_team("ghost", TeamUpdate(name="X"))

    @pytest.mark.asyncio
    async def test_create_with_unknown_coach(self, service):
        ids = await register(service, 6)
        with pytest.raises(NotFoundError) as exc_info:
            await service.create_team(team_create(ids, coach_id="ghost"))
        assert exc_info.value.field == "coachId"
        assert await service.list_teams() == []

    @pytest.mark.asyncio
    async def test_create_with_registered_coach(self, service):
        coach = await service.create_coach(CoachCreate(first_name="Luis", last_name="Paz", document="900"))
        ids = await register(service, 6)
        team = await service.create_team(team_create(ids, coach_id=coach.id))
        assert team.coach_id == coach.id

    @pytest.mark.asyncio
    async def test_update_with_unknown_coach(self, service):
        ids = await register(service, 6)
        team = await service.create_team(team_create(ids))
        with pytest.raises(NotFoundError) as exc_info:
            await service.update_team(team.id, TeamUpdate(coach_id="ghost"))
        assert exc_info.value.field == "coachId"
        assert (await service.get_team(team.id)).coach_id is None

        cleared = await service.update_team(team.id, TeamUpdate(coach_id=None))
        assert cleared.coach_id is None

    @pytest.mark.asyncio
    async def test_candidates(self, service):
        ids = await register(service, 7)
        await service.record_attendance(ids[6], AttendanceStatus.Presente)
        team = await service.create_team(team_create(ids[:6]))

        creating = await service.team_candidates(MainCategory.Masculino)
        assert [c.player_id for c in creating] == [ids[6]]
        assert creating[0].attendance_count == 1

        editing = await service.team_candidates(None, team_id=team.id)
        assert {c.player_id for c in editing} == set(ids)

    @pytest.mark.asyncio
    async def test_candidates_need_category(self, service):
        with pytest.raises(ValidationError):
            await service.team_candidates(None)


class TestAttendanceUseCases:
    """출석"""

    @pytest.mark.asyncio
    async def test_twice_same_day_is_one_record(self, service):
        created = await service.create_player(player_create("111"))
        await service.record_attendance(created.id, AttendanceStatus.Presente)
        await service.record_attendance(created.id, AttendanceStatus.Presente)
        records = await service.list_attendances_for_player(created.id)
        assert len(records) == 1
        assert records[0].status == AttendanceStatus.Presente
        assert records[0].date == FIXED_NOW.date()

    @pytest.mark.asyncio
    async def test_unknown_player(self, service):
        with pytest.raises(NotFoundError):
            await service.record_attendance("ghost", AttendanceStatus.Presente)

    @pytest.mark.asyncio
    async def test_sheet(self, service):
        first = await service.create_player(player_create("111"))
        second = await service.create_player(player_create("222", main_categories=(MainCategory.Femenino,)))
        await service.record_attendance(first.id, AttendanceStatus.Ausente)

        sheet = {e.player_id: e.status for e in await service.attendance_sheet()}
        assert sheet == {first.id: "Ausente", second.id: "Pending"}

        filtered = await service.attendance_sheet(main_category=MainCategory.Femenino)
        assert [e.player_id for e in filtered] == [second.id]

        assert await service.attendance_status(first.id) == "Ausente"


class TestSettingsAndCoaches:
    """설정 및 코치"""

    @pytest.mark.asyncio
    async def test_defaults_materialized(self, service):
        settings = await service.get_settings()
        assert settings.name == "Voley Club"

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, service):
        await disable_flags(service, team_creation=False)
        settings = await service.get_settings()
        assert not settings.team_creation_enabled
        assert settings.monthly_payment_enabled
        assert settings.id == 1

    @pytest.mark.asyncio
    async def test_coach_document_unique(self, service):
        body = CoachCreate(first_name="Luis", last_name="Paz", document="900")
        coach = await service.create_coach(body)
        assert (await service.get_coach_by_document("900")).id == coach.id
        with pytest.raises(ConflictError):
            await service.create_coach(body)


class TestDashboard:
    """대시보드"""

    @pytest.mark.asyncio
    async def test_summary(self, service):
        ids = await register(service, 4)
        await service.record_attendance(ids[0], AttendanceStatus.Presente)
        await service.record_attendance(ids[1], AttendanceStatus.Ausente)

        summary = await service.dashboard_summary()
        assert summary.total_players == 4
        assert summary.total_teams == 0
        assert summary.attendance_rate == 25

    @pytest.mark.asyncio
    async def test_monthly_joins(self, service):
        await register(service, 3)
        buckets = await service.monthly_joins()
        assert len(buckets) == 12
        assert buckets[-1].month == "2024-04"
        assert buckets[-1].count == 3

    @pytest.mark.asyncio
    async def test_tournaments_and_top(self, service, store):
        ids = await register(service, 6)
        await service.create_team(team_create(ids, tournament="Copa"))
        await store.create_player(make_player("star", stats_history=[
            make_record("r1", datetime(2024, 4, 1), attack=90, defense=90),
        ]))

        groups = await service.tournaments()
        assert [g.tournament for g in groups] == ["Copa"]

        top = await service.top_athletes()
        assert top[0].player_id == "star"
        assert top[0].total_score == 180

    @pytest.mark.asyncio
    async def test_overdue_payments(self, service, store):
        await store.create_player(make_player("p1", join_date=datetime(2023, 12, 1)))
        await store.create_player(make_player("p2", join_date=datetime(2024, 4, 1)))
        report = await service.overdue_payments()
        assert [(e.player_id, e.months, e.expellable) for e in report] == [("p1", 4, True)]
