"""
Club Rules Engine

Pure functions over club records: payment-overdue months, roster
validation and eligibility, attendance status, rankings and aggregates.
No I/O; every function can be recomputed on each read.
"""

import calendar
import math
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .errors import ValidationError
from .models import (
    Attendance,
    AverageStats,
    DashboardSummary,
    OverdueEntry,
    Player,
    PlayerStats,
    StatsRecord,
    Team,
    TeamGroup,
    TopAthlete,
)
from .terminology import (
    PENDING,
    AttendanceStatus,
    MainCategory,
    SubCategory,
)

DateLike = Union[date, datetime]

# =====================================================
# Constants
# =====================================================

MIN_ROSTER_SIZE = 6
MAX_ROSTER_SIZE = 14

EXPEL_THRESHOLD_MONTHS = 3

TOP_ATHLETES_LIMIT = 5

JOIN_COUNT_MONTHS = 12

# Sub categories a team of each main category may be created with
ALLOWED_SUB_CATEGORIES: Dict[MainCategory, Tuple[SubCategory, ...]] = {
    MainCategory.Femenino: (SubCategory.Intermedio,),
    MainCategory.Masculino: (SubCategory.Avanzado, SubCategory.Intermedio),
    MainCategory.Mixto: (SubCategory.Avanzado, SubCategory.Intermedio, SubCategory.Basico),
}

# Display order of team groups
SUB_CATEGORY_ORDER = (SubCategory.Avanzado, SubCategory.Intermedio, SubCategory.Basico)

# Stats history windows (months back from today)
STATS_HISTORY_RANGES = {
    "quarterly": 3,
    "semiannually": 6,
    "yearly": 12,
}


# =====================================================
# Date helpers
# =====================================================

def as_date(value: DateLike) -> date:
    """Strip time of day"""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_index(value: DateLike) -> int:
    """Months since year 0, for calendar-month arithmetic"""
    return value.year * 12 + (value.month - 1)


def same_month(a: DateLike, b: DateLike) -> bool:
    return a.year == b.year and a.month == b.month


def shift_months(value: date, months: int) -> date:
    """Same day `months` later (negative = earlier), clamped to month end"""
    index = month_index(value) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_label(index: int) -> str:
    year, month = divmod(index, 12)
    return f"{year:04d}-{month + 1:02d}"


# =====================================================
# Payment overdue
# =====================================================

def overdue_months(
    join_date: DateLike,
    last_payment_date: Optional[DateLike],
    today: DateLike,
) -> int:
    """
    연체 개월 수

    Count of consecutive unpaid monthly cycles as of `today`.
    The join month is a grace month; a payment in the current month clears
    the debt; otherwise every month from the one after the last payment
    (or after joining) through the current month is owed.
    """
    join_day = as_date(join_date)
    today_day = as_date(today)

    if join_day > today_day:
        return 0

    if same_month(join_day, today_day):
        return 0

    if last_payment_date is not None and same_month(last_payment_date, today_day):
        return 0

    anchor = last_payment_date if last_payment_date is not None else join_day
    first_unpaid = month_index(anchor) + 1
    current = month_index(today_day)

    if first_unpaid > current:
        return 0

    return current - first_unpaid + 1


def player_overdue_months(player: Player, today: DateLike) -> int:
    return overdue_months(player.join_date, player.last_payment_date, today)


def can_expel(months: int) -> bool:
    """Debt large enough for the expel action"""
    return months >= EXPEL_THRESHOLD_MONTHS


def overdue_report(players: Iterable[Player], today: DateLike) -> List[OverdueEntry]:
    """Players owing at least one month, largest debt first"""
    entries = []
    for player in players:
        months = player_overdue_months(player, today)
        if months > 0:
            entries.append(OverdueEntry(
                player_id=player.id,
                name=player.name,
                avatar_url=player.avatar_url,
                months=months,
                expellable=can_expel(months),
            ))
    entries.sort(key=lambda e: e.months, reverse=True)
    return entries


# =====================================================
# Attendance
# =====================================================

def status_for(
    attendances: Iterable[Attendance],
    player_id: str,
    day: DateLike,
) -> str:
    """Presente / Ausente, or Pending when nothing is recorded for that day"""
    target = as_date(day)
    for record in attendances:
        if record.player_id == player_id and record.date == target:
            return record.status.value
    return PENDING


def attendance_counts(attendances: Iterable[Attendance]) -> Dict[str, int]:
    """Presente records per player"""
    counts: Dict[str, int] = defaultdict(int)
    for record in attendances:
        if record.status == AttendanceStatus.Presente:
            counts[record.player_id] += 1
    return dict(counts)


def attendance_rate(
    attendances: Iterable[Attendance],
    player_count: int,
    day: DateLike,
) -> int:
    """Percent of players present on `day`, rounded half up"""
    if player_count <= 0:
        return 0
    target = as_date(day)
    present = sum(
        1 for record in attendances
        if record.date == target and record.status == AttendanceStatus.Presente
    )
    return int(math.floor(present * 100 / player_count + 0.5))


# =====================================================
# Team composition
# =====================================================

class RosterSizeError(ValidationError):
    """Roster outside [MIN_ROSTER_SIZE, MAX_ROSTER_SIZE]"""

    def __init__(self, bound: str, size: int):
        limit = MIN_ROSTER_SIZE if bound == "min" else MAX_ROSTER_SIZE
        word = "at least" if bound == "min" else "at most"
        super().__init__(
            "playerIds",
            f"a team must have {word} {limit} players (got {size})",
        )
        self.bound = bound
        self.size = size


def validate_roster(player_ids: Sequence[str]) -> None:
    """Raise unless the roster is a duplicate-free list of 6..14 ids"""
    if len(set(player_ids)) != len(player_ids):
        raise ValidationError("playerIds", "roster contains duplicate player ids")
    size = len(player_ids)
    if size < MIN_ROSTER_SIZE:
        raise RosterSizeError("min", size)
    if size > MAX_ROSTER_SIZE:
        raise RosterSizeError("max", size)


def validate_category_pair(main_category: MainCategory, sub_category: SubCategory) -> None:
    allowed = ALLOWED_SUB_CATEGORIES[main_category]
    if sub_category not in allowed:
        raise ValidationError(
            "subCategory",
            f"{sub_category.value} is not available for {main_category.value} teams "
            f"(allowed: {', '.join(s.value for s in allowed)})",
        )


def is_on_other_team(
    player_id: str,
    teams: Iterable[Team],
    main_category: MainCategory,
    exclude_team_id: Optional[str] = None,
) -> bool:
    """Member of a different team with the same main category"""
    return any(
        team.id != exclude_team_id
        and team.main_category == main_category
        and player_id in team.player_ids
        for team in teams
    )


def is_eligible(
    player: Player,
    teams: Iterable[Team],
    main_category: MainCategory,
    exclude_team_id: Optional[str] = None,
) -> bool:
    if main_category not in player.main_categories:
        return False
    return not is_on_other_team(player.id, teams, main_category, exclude_team_id)


def eligible_players(
    players: Iterable[Player],
    teams: Sequence[Team],
    main_category: MainCategory,
    exclude_team_id: Optional[str] = None,
) -> List[Player]:
    """Candidates for a roster of `main_category`"""
    return [
        player for player in players
        if is_eligible(player, teams, main_category, exclude_team_id)
    ]


def ineligible_roster_ids(
    player_ids: Iterable[str],
    players_by_id: Dict[str, Player],
    teams: Sequence[Team],
    main_category: MainCategory,
    exclude_team_id: Optional[str] = None,
) -> List[str]:
    return [
        pid for pid in player_ids
        if not is_eligible(players_by_id[pid], teams, main_category, exclude_team_id)
    ]


def order_candidates_for_creation(
    players: Iterable[Player],
    attendances: Iterable[Attendance],
) -> List[Player]:
    """Most Presente records first"""
    counts = attendance_counts(attendances)
    return sorted(players, key=lambda p: counts.get(p.id, 0), reverse=True)


def order_candidates_for_edit(players: Iterable[Player]) -> List[Player]:
    """Highest total skill score first"""
    return sorted(players, key=total_score, reverse=True)


def group_teams_by_sub_category(teams: Iterable[Team]) -> List[TeamGroup]:
    """Avanzado, Intermedio, Basico; teams sorted by name inside each group"""
    grouped: Dict[SubCategory, List[Team]] = defaultdict(list)
    for team in teams:
        grouped[team.sub_category].append(team)

    groups = []
    for sub_category in SUB_CATEGORY_ORDER:
        if sub_category in grouped:
            members = sorted(grouped[sub_category], key=lambda t: t.name.casefold())
            groups.append(TeamGroup(sub_category=sub_category, teams=members))
    return groups


# =====================================================
# Rankings & aggregates
# =====================================================

def latest_record(player: Player) -> Optional[StatsRecord]:
    """Newest record; equal dates resolved by the highest record id"""
    if not player.stats_history:
        return None
    return max(player.stats_history, key=lambda r: (r.date, r.id))


def latest_stats(player: Player) -> PlayerStats:
    record = latest_record(player)
    if record is None:
        return PlayerStats()
    return record.stats


def stats_total(stats: PlayerStats) -> int:
    return stats.attack + stats.defense + stats.block + stats.pass_


def total_score(player: Player) -> int:
    return stats_total(latest_stats(player))


def top_athletes(players: Iterable[Player], limit: int = TOP_ATHLETES_LIMIT) -> List[TopAthlete]:
    """Top-N by total score; ties keep input order"""
    ranked = sorted(players, key=total_score, reverse=True)[:limit]
    return [
        TopAthlete(
            player_id=player.id,
            name=player.name,
            avatar_url=player.avatar_url,
            total_score=total_score(player),
            stats=latest_stats(player),
        )
        for player in ranked
    ]


def monthly_join_counts(
    players: Iterable[Player],
    reference_date: DateLike,
    months: int = JOIN_COUNT_MONTHS,
) -> List[Tuple[str, int]]:
    """
    신규 선수 월별 집계

    `months` buckets ending at the reference month, oldest first,
    labelled YYYY-MM. Months without joins are kept with 0.
    """
    end = month_index(reference_date)
    start = end - months + 1
    counts = {index: 0 for index in range(start, end + 1)}

    for player in players:
        index = month_index(player.join_date)
        if index in counts:
            counts[index] += 1

    return [(month_label(index), counts[index]) for index in range(start, end + 1)]


def tournament_groups(teams: Iterable[Team]) -> Dict[str, List[Team]]:
    """Teams per tournament, in first-occurrence order"""
    groups: Dict[str, List[Team]] = {}
    for team in teams:
        if team.tournament:
            groups.setdefault(team.tournament, []).append(team)
    return groups


def peer_average_stats(player: Player, all_players: Iterable[Player]) -> Optional[AverageStats]:
    """Average latest stats of the other players in the same position"""
    peers = [
        p for p in all_players
        if p.position == player.position and p.id != player.id
    ]
    if not peers:
        return None

    totals = {"attack": 0, "defense": 0, "block": 0, "pass_": 0}
    for peer in peers:
        stats = latest_stats(peer)
        for key in totals:
            totals[key] += getattr(stats, key)

    return AverageStats(**{
        key: round(value / len(peers), 1) for key, value in totals.items()
    })


def stats_history_window(
    player: Player,
    range_name: str,
    today: DateLike,
) -> List[StatsRecord]:
    """Records inside the chart window, oldest first"""
    if range_name not in STATS_HISTORY_RANGES:
        raise ValidationError(
            "range",
            f"unknown range {range_name!r} (expected one of {', '.join(STATS_HISTORY_RANGES)})",
        )
    start = shift_months(as_date(today), -STATS_HISTORY_RANGES[range_name])
    history = sorted(player.stats_history, key=lambda r: (r.date, r.id))
    return [record for record in history if as_date(record.date) >= start]


def filter_players(
    players: Iterable[Player],
    main_category: Optional[MainCategory] = None,
    sub_category: Optional[SubCategory] = None,
) -> List[Player]:
    """Category page / attendance sheet filter; None means all"""
    return [
        player for player in players
        if (main_category is None or main_category in player.main_categories)
        and (sub_category is None or player.sub_category == sub_category)
    ]


def dashboard_summary(
    players: Sequence[Player],
    teams: Sequence[Team],
    attendances: Iterable[Attendance],
    today: DateLike,
) -> DashboardSummary:
    return DashboardSummary(
        total_players=len(players),
        total_teams=len(teams),
        attendance_rate=attendance_rate(attendances, len(players), today),
    )
