"""Analytics service: fetches score windows and runs the aggregations per game."""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from db.database import Database
from models import (
    CloseCallsReport,
    ComebackReport,
    ConsistencyReport,
    DistributionReport,
    Game,
    GameScore,
    PhotoFinishReport,
    PlayerTemperatureReport,
    ScoringType,
)
from server.services import analytics
from utils.time_windows import day_range, get_reference_timezone, rolling_cutoff

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Computes analytics reports over active games, in game id order."""

    def __init__(self, db: Database, tz: ZoneInfo | None = None):
        self.db = db
        self.tz = tz or get_reference_timezone()

    async def _scores_by_game(
        self, games: list[Game], start: datetime, end: datetime | None = None
    ) -> dict[int, list[GameScore]]:
        """One bulk read for the window, split per game."""
        by_game: dict[int, list[GameScore]] = {game.id: [] for game in games}
        for score in await self.db.get_scores_in_range(start, end):
            if score.game_id in by_game:
                by_game[score.game_id].append(score)
        return by_game

    async def close_calls(self, days: int = 7, now: datetime | None = None) -> CloseCallsReport:
        cutoff = rolling_cutoff(days, now)
        games = await self.db.list_games()
        scores = await self._scores_by_game(games, cutoff)

        results = [analytics.find_close_calls(game, scores[game.id], self.tz) for game in games]
        return CloseCallsReport(
            days_analyzed=days,
            games=results,
            total_close_calls=sum(r.close_call_count for r in results),
        )

    async def comeback_kings(self, days: int = 14, now: datetime | None = None) -> ComebackReport:
        cutoff = rolling_cutoff(days, now)
        games = await self.db.list_games()
        scores = await self._scores_by_game(games, cutoff)

        return ComebackReport(
            days_analyzed=days,
            games=[analytics.find_comebacks(game, scores[game.id]) for game in games],
        )

    async def consistency_champions(
        self, days: int = 30, min_scores: int = 5, now: datetime | None = None
    ) -> ConsistencyReport:
        cutoff = rolling_cutoff(days, now)
        games = await self.db.list_games()
        scores = await self._scores_by_game(games, cutoff)

        return ConsistencyReport(
            days_analyzed=days,
            minimum_scores=min_scores,
            games=[analytics.rank_consistency(game, scores[game.id], min_scores) for game in games],
        )

    async def score_distribution(
        self, scoring_type: ScoringType, days: int = 30, now: datetime | None = None
    ) -> DistributionReport:
        cutoff = rolling_cutoff(days, now)
        games = await self.db.list_games(scoring_type=scoring_type)
        scores = await self._scores_by_game(games, cutoff)

        return DistributionReport(
            scoring_type=scoring_type,
            days_analyzed=days,
            games=[analytics.score_distribution(game, scores[game.id]) for game in games],
        )

    async def photo_finishes(
        self, day: date | None = None, now: datetime | None = None
    ) -> PhotoFinishReport:
        window = day_range(day, self.tz, now)
        games = await self.db.list_games()
        scores = await self._scores_by_game(games, window.start, window.end)

        finishes = []
        for game in games:
            finish = analytics.detect_photo_finish(game, scores[game.id], window.local_date)
            if finish:
                finishes.append(finish)

        return PhotoFinishReport(
            date=window.local_date,
            photo_finishes=finishes,
            total_photo_finishes=len(finishes),
        )

    async def player_temperature(
        self, player_name: str, days: int = 7, now: datetime | None = None
    ) -> PlayerTemperatureReport:
        cutoff = rolling_cutoff(days, now)
        games = await self.db.list_games()
        scores = await self._scores_by_game(games, cutoff)

        results = []
        for game in games:
            result = analytics.player_temperature(game, scores[game.id], player_name)
            if result:
                results.append(result)

        logger.debug(f"Player temperature for {player_name!r}: {len(results)} game(s)")
        return PlayerTemperatureReport(
            player_name=player_name,
            days_analyzed=days,
            games=results,
            overall_temperature=analytics.overall_temperature(results),
        )
