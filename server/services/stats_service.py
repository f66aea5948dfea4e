"""Stats service for daily champions and the top-winners trend."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from db.database import Database
from models import DailyChampions, TopWinnersTrend
from server.services import analytics
from utils.time_windows import get_reference_timezone, recent_windows, utc_day_range

MAX_TREND_DAYS = 31
MAX_TOP_PLAYERS = 20


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class StatsService:
    def __init__(self, db: Database, tz: ZoneInfo | None = None):
        self.db = db
        self.tz = tz or get_reference_timezone()

    async def daily_champions(
        self, day: date | None = None, now: datetime | None = None
    ) -> list[DailyChampions]:
        """Tied winners per active game for one UTC calendar day."""
        start, end = utc_day_range(day, now)
        games = await self.db.list_games()
        scores = await self.db.get_scores_in_range(start, end)

        result = []
        for game in games:
            champions = analytics.select_winners(
                [s for s in scores if s.game_id == game.id], game.scoring_type
            )
            first = champions[0] if champions else None
            result.append(
                DailyChampions(
                    game_id=game.id,
                    game_name=game.name,
                    scoring_type=game.scoring_type,
                    champions=champions,
                    score=first.value_for(game.scoring_type) if first else None,
                    guess_count=first.guess_count if first else None,
                    completion_time=first.completion_time if first else None,
                    date_achieved=first.date_achieved if first else None,
                )
            )

        # Stable order by game name
        result.sort(key=lambda entry: entry.game_name)
        return result

    async def top_winners(
        self,
        days: int = 7,
        top: int = 5,
        game_id: int | None = None,
        now: datetime | None = None,
    ) -> TopWinnersTrend:
        """Wins per player per local day over the last ``days`` days."""
        days = clamp(days, 1, MAX_TREND_DAYS)
        top = clamp(top, 1, MAX_TOP_PLAYERS)

        windows = recent_windows(days, self.tz, now)
        scores = await self.db.get_scores_in_range(windows.start, windows.end, game_id=game_id)
        games = {game.id: game for game in await self.db.list_games(active_only=False)}

        return TopWinnersTrend(
            days=days,
            labels=[d.isoformat() for d in windows.days],
            series=analytics.build_top_winners(scores, games, windows.index, self.tz, top),
        )
