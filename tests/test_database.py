"""Tests for database operations."""

from datetime import timedelta

import pytest

from db.database import DEFAULT_GAMES, Database, from_db_timestamp, to_db_timestamp
from errors import ConcurrencyConflictError, NotFoundError
from models import ScoringType
from tests.helpers import at


class TestDatabaseConnection:
    @pytest.mark.asyncio
    async def test_connect_and_close(self):
        db = Database(":memory:")
        await db.connect()
        assert db._connection is not None
        await db.close()
        assert db._connection is None

    @pytest.mark.asyncio
    async def test_migrations_recorded(self, db):
        names = [row["name"] for row in await db.fetch_all("SELECT name FROM _migrations ORDER BY name")]
        assert names == ["001_initial.sql", "002_score_images.sql", "003_score_indexes.sql"]

    @pytest.mark.asyncio
    async def test_migrations_not_rerun(self, db):
        await db._run_migrations()
        assert await db.fetch_value("SELECT COUNT(*) FROM _migrations") == 3


class TestTimestamps:
    def test_fixed_width_utc(self):
        assert to_db_timestamp(at(5, 7, 3)) == "2025-08-05T07:03:00.000000Z"

    def test_naive_treated_as_utc(self):
        assert from_db_timestamp(to_db_timestamp(at(5).replace(tzinfo=None))) == at(5)


class TestGames:
    @pytest.mark.asyncio
    async def test_create_and_get(self, db):
        game = await db.create_game("Queens", "Grid puzzle", ScoringType.TIME)
        assert game.id > 0
        assert game.version == 1
        assert game.is_active

        fetched = await db.get_game(game.id)
        assert fetched.name == "Queens"
        assert fetched.scoring_type == ScoringType.TIME
        assert fetched.created_date is not None

    @pytest.mark.asyncio
    async def test_get_missing_game(self, db):
        assert await db.get_game(999) is None

    @pytest.mark.asyncio
    async def test_list_filters(self, db):
        queens = await db.create_game("Queens", "", ScoringType.TIME)
        pinpoint = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        retired = await db.create_game("Retired", "", ScoringType.TIME, is_active=False)

        assert [g.id for g in await db.list_games()] == [queens.id, pinpoint.id]
        assert [g.id for g in await db.list_games(active_only=False)] == [queens.id, pinpoint.id, retired.id]
        assert [g.id for g in await db.list_games(scoring_type=ScoringType.TIME)] == [queens.id]

    @pytest.mark.asyncio
    async def test_update_bumps_version(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        updated = await db.update_game(game.id, "Queens II", "new", True, ScoringType.TIME, expected_version=1)
        assert updated.name == "Queens II"
        assert updated.version == 2

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        await db.update_game(game.id, "A", "", True, ScoringType.TIME, expected_version=1)
        with pytest.raises(ConcurrencyConflictError):
            await db.update_game(game.id, "B", "", True, ScoringType.TIME, expected_version=1)

    @pytest.mark.asyncio
    async def test_update_missing_game(self, db):
        with pytest.raises(NotFoundError):
            await db.update_game(42, "A", "", True, ScoringType.TIME)

    @pytest.mark.asyncio
    async def test_deactivate(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        assert await db.deactivate_game(game.id)
        assert not (await db.get_game(game.id)).is_active
        assert await db.list_games() == []
        assert not await db.deactivate_game(999)

    @pytest.mark.asyncio
    async def test_seed_only_when_empty(self, db):
        assert await db.seed_default_games() == len(DEFAULT_GAMES)
        assert await db.seed_default_games() == 0
        games = await db.list_games()
        assert [(g.name, g.scoring_type) for g in games] == [(n, st) for n, _, st in DEFAULT_GAMES]


class TestScores:
    @pytest.mark.asyncio
    async def test_add_and_get(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        score = await db.add_score(
            game.id, "Alice", completion_time=timedelta(seconds=42.5), date_achieved=at(15)
        )

        assert score.game_name == "Queens"
        assert score.scoring_type == ScoringType.TIME
        assert score.completion_time == timedelta(seconds=42.5)
        assert score.guess_count is None
        assert score.date_achieved == at(15)
        assert score.score == 42.5
        assert not score.has_image

    @pytest.mark.asyncio
    async def test_date_defaults_to_now(self, db):
        game = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        score = await db.add_score(game.id, "Alice", guess_count=3)
        assert score.date_achieved.tzinfo is not None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db):
        game = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        old = await db.add_score(game.id, "A", guess_count=3, date_achieved=at(10))
        new = await db.add_score(game.id, "B", guess_count=3, date_achieved=at(12))
        assert [s.id for s in await db.list_scores()] == [new.id, old.id]
        assert [s.id for s in await db.list_scores(game_id=game.id + 1)] == []

    @pytest.mark.asyncio
    async def test_range_is_half_open(self, db):
        game = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        await db.add_score(game.id, "Before", guess_count=3, date_achieved=at(9, 23, 59))
        start = await db.add_score(game.id, "Start", guess_count=3, date_achieved=at(10, 0))
        await db.add_score(game.id, "End", guess_count=3, date_achieved=at(11, 0))

        scores = await db.get_scores_in_range(at(10, 0), at(11, 0))
        assert [s.id for s in scores] == [start.id]
        assert len(await db.get_scores_in_range(at(10, 0))) == 2

    @pytest.mark.asyncio
    async def test_ranked_best_first_ties_by_submission(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        slow = await db.add_score(game.id, "Slow", completion_time=timedelta(seconds=90))
        first = await db.add_score(game.id, "First", completion_time=timedelta(seconds=30))
        second = await db.add_score(game.id, "Second", completion_time=timedelta(seconds=30))
        await db.add_score(game.id, "NoTime", guess_count=4)

        ranked = await db.get_ranked_scores(game.id, ScoringType.TIME)
        assert [s.id for s in ranked] == [first.id, second.id, slow.id]

        top = await db.get_ranked_scores(game.id, ScoringType.TIME, limit=1)
        assert [s.id for s in top] == [first.id]

    @pytest.mark.asyncio
    async def test_image_round_trip(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        score = await db.add_score(
            game.id, "Alice", completion_time=timedelta(seconds=30),
            image=b"\x89PNGdata", image_content_type="image/png",
        )
        assert score.has_image
        assert await db.get_score_image(score.id) == (b"\x89PNGdata", "image/png")

    @pytest.mark.asyncio
    async def test_no_image(self, db):
        game = await db.create_game("Queens", "", ScoringType.TIME)
        score = await db.add_score(game.id, "Alice", completion_time=timedelta(seconds=30))
        assert await db.get_score_image(score.id) is None
        assert await db.get_score_image(999) is None

    @pytest.mark.asyncio
    async def test_update_and_conflict(self, db):
        game = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        score = await db.add_score(game.id, "Alice", guess_count=4, date_achieved=at(15))

        updated = await db.update_score(score.id, game.id, "Alicia", 2, None, None, expected_version=1)
        assert updated.player_name == "Alicia"
        assert updated.guess_count == 2
        assert updated.date_achieved == at(15)
        assert updated.version == 2

        with pytest.raises(ConcurrencyConflictError):
            await db.update_score(score.id, game.id, "Al", 2, None, None, expected_version=1)

        with pytest.raises(NotFoundError):
            await db.update_score(999, game.id, "Al", 2, None, None)

    @pytest.mark.asyncio
    async def test_delete(self, db):
        game = await db.create_game("Pinpoint", "", ScoringType.GUESSES)
        score = await db.add_score(game.id, "Alice", guess_count=4)
        assert await db.delete_score(score.id)
        assert await db.get_score(score.id) is None
        assert not await db.delete_score(score.id)
