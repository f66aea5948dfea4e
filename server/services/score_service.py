"""Score submission, admin edits and leaderboards."""

import logging
from datetime import date
from zoneinfo import ZoneInfo

from db.database import Database
from errors import InvalidInputError, NotFoundError
from models import Game, GameScore, ScoreCreate, ScoreUpdate, ScoringType
from server.services.image_service import validate_image
from utils.time_windows import day_range, get_reference_timezone

logger = logging.getLogger(__name__)


def value_fields(game: Game, payload: ScoreCreate) -> dict:
    """Keep only the field matching the game's scoring type, which must be set."""
    if game.scoring_type == ScoringType.TIME:
        if payload.completion_time is None:
            raise InvalidInputError(f"{game.name} is scored by time; completion_time is required")
        if payload.completion_time.total_seconds() < 0:
            raise InvalidInputError("completion_time cannot be negative")
        return {"guess_count": None, "completion_time": payload.completion_time}

    if payload.guess_count is None:
        raise InvalidInputError(f"{game.name} is scored by guesses; guess_count is required")
    return {"guess_count": payload.guess_count, "completion_time": None}


def clean_player_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError("player_name cannot be blank")
    return cleaned


def clean_profile_url(url: str | None) -> str | None:
    if url is None or not url.strip():
        return None
    return url.strip()


class ScoreService:
    def __init__(self, db: Database, tz: ZoneInfo | None = None):
        self.db = db
        self.tz = tz or get_reference_timezone()

    async def _active_game(self, game_id: int) -> Game:
        game = await self.db.get_game(game_id)
        if not game or not game.is_active:
            raise NotFoundError(f"Game {game_id} not found")
        return game

    async def submit_score(
        self,
        payload: ScoreCreate,
        image: bytes | None = None,
        image_content_type: str | None = None,
    ) -> GameScore:
        """Store a new score stamped with the current time."""
        game = await self._active_game(payload.game_id)
        fields = value_fields(game, payload)

        if image is not None:
            image_content_type = validate_image(image, image_content_type)

        score = await self.db.add_score(
            game_id=game.id,
            player_name=clean_player_name(payload.player_name),
            profile_url=clean_profile_url(payload.profile_url),
            image=image,
            image_content_type=image_content_type if image is not None else None,
            **fields,
        )
        logger.info(f"Recorded {game.name} score {score.id} for {score.player_name}")
        return score

    async def update_score(self, score_id: int, payload: ScoreUpdate) -> GameScore:
        if payload.id != score_id:
            raise InvalidInputError("Score id in body does not match the URL")

        game = await self.db.get_game(payload.game_id)
        if not game:
            raise NotFoundError(f"Game {payload.game_id} not found")

        return await self.db.update_score(
            score_id=score_id,
            game_id=game.id,
            player_name=clean_player_name(payload.player_name),
            profile_url=clean_profile_url(payload.profile_url),
            date_achieved=payload.date_achieved,
            expected_version=payload.version,
            **value_fields(game, payload),
        )

    async def delete_score(self, score_id: int) -> None:
        if not await self.db.delete_score(score_id):
            raise NotFoundError(f"Score {score_id} not found")
        logger.info(f"Deleted score {score_id}")

    async def get_score(self, score_id: int) -> GameScore:
        score = await self.db.get_score(score_id)
        if not score:
            raise NotFoundError(f"Score {score_id} not found")
        return score

    async def ranked_scores(self, game_id: int, top: int | None = None) -> list[GameScore]:
        """All-time leaderboard for a game, best first."""
        game = await self.db.get_game(game_id)
        if not game:
            raise NotFoundError(f"Game {game_id} not found")
        return await self.db.get_ranked_scores(game.id, game.scoring_type, limit=top)

    async def daily_leaderboard(self, game_id: int, day: date | None = None, top: int = 10) -> list[GameScore]:
        """Leaderboard for one local calendar day."""
        game = await self.db.get_game(game_id)
        if not game:
            raise NotFoundError(f"Game {game_id} not found")
        window = day_range(day, self.tz)
        return await self.db.get_ranked_scores(
            game.id, game.scoring_type, limit=top, start=window.start, end=window.end
        )
