"""Stats endpoints: daily champions and the top-winners trend."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from models import DailyChampions, TopWinnersTrend
from server.dependencies import analytics_failure_boundary, get_stats_service
from server.services.stats_service import StatsService

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/daily-champions")
async def daily_champions(
    day: date | None = Query(None, alias="date"),
    service: StatsService = Depends(get_stats_service),
) -> list[DailyChampions]:
    with analytics_failure_boundary("daily champions"):
        return await service.daily_champions(day)


@router.get("/top-winners")
async def top_winners(
    days: int = Query(7),
    top: int = Query(5),
    game_id: int | None = Query(None, alias="gameId"),
    service: StatsService = Depends(get_stats_service),
) -> TopWinnersTrend:
    """Days are clamped to [1, 31] and top to [1, 20]."""
    with analytics_failure_boundary("top winners"):
        return await service.top_winners(days, top, game_id)
