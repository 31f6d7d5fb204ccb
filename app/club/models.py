"""
Club Management Models

Pydantic 모델 정의. Python code uses snake_case; the wire format is camelCase
with display labels for sub category and position (see terminology.py).
"""

import re
from datetime import date, datetime, timezone
from typing import Annotated, Optional, List

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .terminology import (
    MainCategory,
    SubCategory,
    Position,
    AttendanceStatus,
    display_position,
    display_sub_category,
    parse_attendance_status,
    parse_main_category,
    parse_position,
    parse_sub_category,
)


# =============================================
# Field types
# =============================================

def as_utc(value: datetime) -> datetime:
    """Timezone-aware UTC; naive values are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]

MainCategoryField = Annotated[MainCategory, BeforeValidator(parse_main_category)]
SubCategoryField = Annotated[
    SubCategory,
    BeforeValidator(parse_sub_category),
    PlainSerializer(display_sub_category, return_type=str),
]
PositionField = Annotated[
    Position,
    BeforeValidator(parse_position),
    PlainSerializer(display_position, return_type=str),
]
AttendanceStatusField = Annotated[AttendanceStatus, BeforeValidator(parse_attendance_status)]

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")

DEFAULT_PLAYER_AVATAR = "https://picsum.photos/seed/newplayer/100/100"
DEFAULT_COACH_AVATAR = "https://picsum.photos/seed/newcoach/100/100"


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _required_text(value: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError("must not be blank")
    return str(value).strip()


def _unique_categories(values: List[MainCategory]) -> List[MainCategory]:
    unique: List[MainCategory] = []
    for value in values:
        if value not in unique:
            unique.append(value)
    if not unique:
        raise ValueError("at least one main category is required")
    return unique


# =============================================
# Stats
# =============================================

class PlayerStats(CamelModel):
    """Four skill scores"""
    attack: int = Field(default=0, ge=0, le=100)
    defense: int = Field(default=0, ge=0, le=100)
    block: int = Field(default=0, ge=0, le=100)
    pass_: int = Field(default=0, ge=0, le=100, alias="pass")


class AverageStats(CamelModel):
    """Averaged skill scores (one decimal)"""
    attack: float = 0.0
    defense: float = 0.0
    block: float = 0.0
    pass_: float = Field(default=0.0, alias="pass")


class StatsRecord(CamelModel):
    """Dated skill assessment"""
    id: str
    date: UtcDateTime
    stats: PlayerStats


class StatsRecordCreate(CamelModel):
    """Stats record supplied on registration"""
    date: Optional[UtcDateTime] = None
    stats: PlayerStats


# =============================================
# Player
# =============================================

class Player(CamelModel):
    """Registered player"""
    id: str
    name: str
    document: str
    address: str
    phone: str
    join_date: UtcDateTime
    birth_date: date
    avatar_url: str = DEFAULT_PLAYER_AVATAR
    main_categories: List[MainCategoryField]
    sub_category: SubCategoryField
    position: PositionField
    stats_history: List[StatsRecord] = []
    last_payment_date: Optional[UtcDateTime] = None


class PlayerCreate(CamelModel):
    """선수 등록 요청"""
    name: str
    document: str
    address: str
    phone: str
    birth_date: date
    avatar_url: str = DEFAULT_PLAYER_AVATAR
    main_categories: List[MainCategoryField] = Field(..., min_length=1)
    sub_category: SubCategoryField
    position: PositionField
    initial_stats: PlayerStats = Field(
        default_factory=lambda: PlayerStats(attack=5, defense=5, block=5, pass_=5)
    )
    stats_history: Optional[List[StatsRecordCreate]] = None

    @field_validator("name", "document", "address", "phone")
    @classmethod
    def validate_required_text(cls, v):
        return _required_text(v)

    @field_validator("main_categories")
    @classmethod
    def validate_main_categories(cls, v):
        return _unique_categories(v)


class PlayerUpdate(CamelModel):
    """선수 수정 요청 (full replacement of editable fields; joinDate is ignored)"""
    name: str
    document: str
    address: str
    phone: str
    birth_date: date
    avatar_url: str = DEFAULT_PLAYER_AVATAR
    main_categories: List[MainCategoryField] = Field(..., min_length=1)
    sub_category: SubCategoryField
    position: PositionField
    last_payment_date: Optional[UtcDateTime] = None
    latest_stats: Optional[PlayerStats] = None

    @field_validator("name", "document", "address", "phone")
    @classmethod
    def validate_required_text(cls, v):
        return _required_text(v)

    @field_validator("main_categories")
    @classmethod
    def validate_main_categories(cls, v):
        return _unique_categories(v)


# =============================================
# Team
# =============================================

class Team(CamelModel):
    """Team with its roster"""
    id: str
    name: str
    main_category: MainCategoryField
    sub_category: SubCategoryField
    player_ids: List[str] = []
    tournament: Optional[str] = None
    tournament_position: Optional[str] = None
    coach_id: Optional[str] = None


class TeamCreate(CamelModel):
    """팀 생성 요청"""
    name: str
    main_category: MainCategoryField
    sub_category: SubCategoryField
    player_ids: List[str]
    tournament: Optional[str] = None
    tournament_position: Optional[str] = None
    coach_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _required_text(v)

    @field_validator("tournament", "tournament_position", "coach_id")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class TeamUpdate(CamelModel):
    """팀 수정 요청. Category fields are not part of this schema and are dropped."""
    name: Optional[str] = None
    tournament: Optional[str] = None
    tournament_position: Optional[str] = None
    player_ids: Optional[List[str]] = None
    coach_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return _required_text(v)

    @field_validator("tournament", "tournament_position", "coach_id")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


# =============================================
# Attendance
# =============================================

class Attendance(CamelModel):
    """출석 기록, one per (player_id, date)"""
    id: Optional[str] = None
    player_id: str
    date: date
    status: AttendanceStatusField


class AttendanceCreate(CamelModel):
    """출석 기록 요청"""
    player_id: str
    status: AttendanceStatusField

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, v):
        return _required_text(v)


class AttendanceSheetEntry(CamelModel):
    """Resolved status of one player for one day"""
    player_id: str
    name: str
    avatar_url: str
    status: str  # Presente | Ausente | Pending


# =============================================
# Coach
# =============================================

class Coach(CamelModel):
    """코치"""
    id: str
    first_name: str
    last_name: str
    document: str
    avatar_url: str = DEFAULT_COACH_AVATAR


class CoachCreate(CamelModel):
    """코치 등록 요청"""
    first_name: str
    last_name: str
    document: str
    avatar_url: str = DEFAULT_COACH_AVATAR

    @field_validator("first_name", "last_name", "document")
    @classmethod
    def validate_required_text(cls, v):
        return _required_text(v)


# =============================================
# Club settings
# =============================================

class ClubColors(CamelModel):
    """7-entry palette"""
    primary: str
    secondary: str
    tertiary: str
    background: str
    surface: str
    text_primary: str
    text_secondary: str

    @field_validator("*")
    @classmethod
    def validate_hex(cls, v):
        if not isinstance(v, str) or not HEX_COLOR.match(v):
            raise ValueError(f"not a hex color: {v!r}")
        return v


class ClubSettingsData(CamelModel):
    """Editable club settings; every field is required on update"""
    name: str
    logo_url: str
    colors: ClubColors
    team_creation_enabled: bool
    monthly_payment_enabled: bool

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _required_text(v)


class ClubSettings(ClubSettingsData):
    """Singleton settings record"""
    id: int = 1


CLUB_SETTINGS_ID = 1


def default_club_settings() -> ClubSettings:
    """Settings materialized on first access"""
    return ClubSettings(
        id=CLUB_SETTINGS_ID,
        name="Voley Club",
        logo_url="/logo-default.svg",
        colors=ClubColors(
            primary="#DC2626",
            secondary="#F9FAFB",
            tertiary="#FBBF24",
            background="#000000",
            surface="#1F2937",
            text_primary="#F9FAFB",
            text_secondary="#9CA3AF",
        ),
        team_creation_enabled=True,
        monthly_payment_enabled=True,
    )


# =============================================
# Dashboard / read models
# =============================================

class DashboardSummary(CamelModel):
    """대시보드 요약"""
    total_players: int
    total_teams: int
    attendance_rate: int  # percent of players present today


class TopAthlete(CamelModel):
    """Top-N ranking row"""
    player_id: str
    name: str
    avatar_url: str
    total_score: int
    stats: PlayerStats


class MonthlyJoinBucket(CamelModel):
    """New players in one calendar month"""
    month: str  # YYYY-MM
    count: int


class TournamentGroup(CamelModel):
    """Teams entered in one tournament"""
    tournament: str
    teams: List[Team]


class OverdueEntry(CamelModel):
    """Player owing monthly fees"""
    player_id: str
    name: str
    avatar_url: str
    months: int
    expellable: bool


class OverdueStatus(CamelModel):
    """Overdue months of one player"""
    player_id: str
    months: int
    expellable: bool


class TeamCandidate(CamelModel):
    """Eligible player for a team roster"""
    player_id: str
    name: str
    avatar_url: str
    total_score: int
    attendance_count: int


class TeamGroup(CamelModel):
    """Teams of one sub category"""
    sub_category: SubCategoryField
    teams: List[Team]


class ExpelRequest(CamelModel):
    """Explicit confirmation for the irreversible expel action"""
    confirm: bool = False
