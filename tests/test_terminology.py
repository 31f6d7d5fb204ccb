"""
Terminology & Model Tests - 표시 매핑 및 요청 스키마 테스트
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from pydantic import ValidationError as PydanticValidationError

from app.club.errors import ValidationError
from app.club.models import (
    ClubColors,
    ClubSettingsData,
    Player,
    PlayerCreate,
    StatsRecord,
    TeamCreate,
    TeamUpdate,
    default_club_settings,
)
from app.club.terminology import (
    ALL_MAPPINGS,
    DisplayMapping,
    MainCategory,
    Position,
    SubCategory,
    POSITION_MAPPING,
    SUB_CATEGORY_MAPPING,
    parse_position,
    parse_sub_category,
)

from conftest import make_player


class TestDisplayMapping:
    """저장값 <-> 표시값"""

    def test_all_tables_are_bijections(self):
        for mapping in ALL_MAPPINGS:
            mapping.validate()
            assert len(mapping.from_display_map) == len(list(mapping.enum_type))

    def test_round_trip_every_member(self):
        for mapping in ALL_MAPPINGS:
            for member in mapping.enum_type:
                assert mapping.from_display(mapping.to_display(member)) == member

    def test_known_labels(self):
        assert SUB_CATEGORY_MAPPING.to_display(SubCategory.Basico) == "Básico"
        assert POSITION_MAPPING.to_display(Position.OutsideHitter) == "Punta Receptor"
        assert POSITION_MAPPING.from_display("Colocador") == Position.Setter

    def test_parse_accepts_label_and_storage_value(self):
        assert parse_sub_category("Básico") == SubCategory.Basico
        assert parse_sub_category("Basico") == SubCategory.Basico
        assert parse_position("Líbero") == Position.Libero

    def test_unmapped_value_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_position("Portero")
        assert exc_info.value.field == "position"

    def test_incomplete_table_fails_validation(self):
        """Missing label -> startup error"""
        broken = DisplayMapping(
            enum_type=SubCategory,
            field="subCategory",
            to_display_map={"Basico": "Básico", "Intermedio": "Intermedio"},
        )
        with pytest.raises(ValueError):
            broken.validate()

    def test_duplicate_label_fails_validation(self):
        broken = DisplayMapping(
            enum_type=MainCategory,
            field="mainCategory",
            to_display_map={"Masculino": "M", "Femenino": "M", "Mixto": "Mixto"},
        )
        with pytest.raises(ValueError):
            broken.validate()


class TestPlayerSchema:
    """선수 요청 스키마"""

    def _payload(self, **overrides):
        data = {
            "name": "Ana",
            "document": "123",
            "address": "Calle 1",
            "phone": "555",
            "birthDate": "2001-02-03",
            "mainCategories": ["Femenino"],
            "subCategory": "Intermedio",
            "position": "Colocador",
        }
        data.update(overrides)
        return data

    def test_camel_case_payload(self):
        body = PlayerCreate.model_validate(self._payload())
        assert body.birth_date == date(2001, 2, 3)
        assert body.position == Position.Setter
        assert body.initial_stats.attack == 5
        assert body.initial_stats.pass_ == 5

    def test_blank_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            PlayerCreate.model_validate(self._payload(name="   "))

    def test_empty_categories_rejected(self):
        with pytest.raises(PydanticValidationError):
            PlayerCreate.model_validate(self._payload(mainCategories=[]))

    def test_unknown_position_rejected(self):
        with pytest.raises(PydanticValidationError):
            PlayerCreate.model_validate(self._payload(position="Portero"))

    def test_duplicate_categories_collapsed(self):
        body = PlayerCreate.model_validate(self._payload(mainCategories=["Mixto", "Mixto", "Femenino"]))
        assert body.main_categories == [MainCategory.Mixto, MainCategory.Femenino]

    def test_stats_out_of_range_rejected(self):
        with pytest.raises(PydanticValidationError):
            PlayerCreate.model_validate(self._payload(initialStats={"attack": 101}))

    def test_player_serializes_display_labels(self):
        """Wire format: camelCase + display labels"""
        player = make_player("p1", sub_category=SubCategory.Basico, position=Position.MiddleBlocker)
        data = player.model_dump(by_alias=True, mode="json")
        assert data["subCategory"] == "Básico"
        assert data["position"] == "Central"
        assert data["mainCategories"] == ["Masculino"]
        assert "joinDate" in data

    def test_datetimes_normalized_to_utc(self):
        """naive = UTC; offsets converted"""
        record = StatsRecord.model_validate({
            "id": "r1",
            "date": "2024-01-01T02:00:00+02:00",
            "stats": {"attack": 1},
        })
        assert record.date == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert record.date.utcoffset() == timedelta(0)

        player = make_player("p1", join_date=datetime(2024, 1, 15), last_payment_date=datetime(2024, 3, 1))
        assert player.join_date.tzinfo is not None
        assert player.last_payment_date == datetime(2024, 3, 1, tzinfo=timezone.utc)

    def test_player_round_trip_through_wire(self):
        player = make_player("p1", sub_category=SubCategory.Basico)
        again = Player.model_validate(player.model_dump(by_alias=True, mode="json"))
        assert again == player


class TestTeamSchema:
    """팀 요청 스키마"""

    def test_blank_tournament_becomes_none(self):
        body = TeamCreate.model_validate({
            "name": "Leonas",
            "mainCategory": "Femenino",
            "subCategory": "Intermedio",
            "playerIds": ["a"],
            "tournament": " ",
        })
        assert body.tournament is None

    def test_update_ignores_categories(self):
        """Category fields are not editable"""
        body = TeamUpdate.model_validate({"name": "Nuevo", "mainCategory": "Mixto"})
        assert body.model_fields_set == {"name"}


class TestClubSettingsSchema:
    """클럽 설정 스키마"""

    def test_defaults(self):
        settings = default_club_settings()
        assert settings.id == 1
        assert settings.name == "Voley Club"
        assert settings.logo_url == "/logo-default.svg"
        assert settings.colors.primary == "#DC2626"
        assert settings.colors.text_secondary == "#9CA3AF"
        assert settings.team_creation_enabled
        assert settings.monthly_payment_enabled

    def test_bad_color_rejected(self):
        with pytest.raises(PydanticValidationError):
            ClubColors(
                primary="red", secondary="#fff", tertiary="#fff", background="#fff",
                surface="#fff", text_primary="#fff", text_secondary="#fff",
            )

    def test_every_field_required(self):
        with pytest.raises(PydanticValidationError):
            ClubSettingsData.model_validate({"name": "Club"})
