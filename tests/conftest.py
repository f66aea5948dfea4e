"""Pytest configuration and shared fixtures."""

import itertools
from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from db.database import Database
from models import Game, GameScore, ScoringType
from tests.helpers import PACIFIC, at


@pytest_asyncio.fixture
async def db():
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def pacific():
    return PACIFIC


@pytest.fixture
def time_game():
    return Game(id=1, name="Queens", scoring_type=ScoringType.TIME)


@pytest.fixture
def guess_game():
    return Game(id=2, name="Pinpoint", scoring_type=ScoringType.GUESSES)


@pytest.fixture
def make_score():
    """Build GameScore records without a database."""
    ids = itertools.count(1)

    def _make(
        player_name: str = "Alice",
        seconds: float | None = None,
        guesses: int | None = None,
        when: datetime | None = None,
        game_id: int = 1,
        profile_url: str | None = None,
    ) -> GameScore:
        return GameScore(
            id=next(ids),
            game_id=game_id,
            player_name=player_name,
            guess_count=guesses,
            completion_time=timedelta(seconds=seconds) if seconds is not None else None,
            date_achieved=when or at(15),
            profile_url=profile_url,
        )

    return _make
