"""
Pytest configuration and fixtures for the volleyball club manager tests
"""

import pytest
import sys
from datetime import date, datetime, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.club.models import Player, PlayerCreate, PlayerStats, StatsRecord, Team
from app.club.service import ClubService
from app.club.terminology import MainCategory, Position, SubCategory
from database.memory_store import InMemoryClubStore

FIXED_NOW = datetime(2024, 4, 20, 10, 30, tzinfo=timezone.utc)


def make_player(
    player_id: str,
    name: str = None,
    join_date: datetime = datetime(2024, 1, 15),
    main_categories=(MainCategory.Masculino,),
    sub_category: SubCategory = SubCategory.Intermedio,
    position: Position = Position.Setter,
    stats_history=None,
    last_payment_date: datetime = None,
) -> Player:
    """Player record built directly (bypasses the service)"""
    return Player(
        id=player_id,
        name=name or f"Jugador {player_id}",
        document=f"DOC-{player_id}",
        address="Calle 1",
        phone="555-0000",
        join_date=join_date,
        birth_date=date(2000, 1, 1),
        main_categories=list(main_categories),
        sub_category=sub_category,
        position=position,
        stats_history=stats_history or [],
        last_payment_date=last_payment_date,
    )


def make_record(record_id: str, when: datetime, attack=0, defense=0, block=0, pass_=0) -> StatsRecord:
    return StatsRecord(
        id=record_id,
        date=when,
        stats=PlayerStats(attack=attack, defense=defense, block=block, pass_=pass_),
    )


def make_team(team_id: str, player_ids, main_category=MainCategory.Masculino,
              sub_category=SubCategory.Intermedio, name=None, tournament=None) -> Team:
    return Team(
        id=team_id,
        name=name or f"Equipo {team_id}",
        main_category=main_category,
        sub_category=sub_category,
        player_ids=list(player_ids),
        tournament=tournament,
    )


def player_create(document: str, main_categories=(MainCategory.Masculino,), **overrides) -> PlayerCreate:
    data = dict(
        name=f"Jugador {document}",
        document=document,
        address="Calle 1",
        phone="555-0000",
        birth_date=date(2000, 1, 1),
        main_categories=list(main_categories),
        sub_category=SubCategory.Intermedio,
        position=Position.Setter,
    )
    data.update(overrides)
    return PlayerCreate(**data)


@pytest.fixture
def store():
    """Fresh in-memory store"""
    return InMemoryClubStore()


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def service(store, now):
    """Service with a fixed clock"""
    return ClubService(store, clock=lambda: now)
