"""Analytics endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from errors import InvalidInputError
from models import (
    CloseCallsReport,
    ComebackReport,
    ConsistencyReport,
    DistributionReport,
    PhotoFinishReport,
    PlayerTemperatureReport,
    ScoringType,
)
from server.dependencies import analytics_failure_boundary, get_analytics_service
from server.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/close-calls")
async def close_calls(
    days: int = Query(7),
    service: AnalyticsService = Depends(get_analytics_service),
) -> CloseCallsReport:
    with analytics_failure_boundary("close calls"):
        return await service.close_calls(days)


@router.get("/comeback-kings")
async def comeback_kings(
    days: int = Query(14),
    service: AnalyticsService = Depends(get_analytics_service),
) -> ComebackReport:
    with analytics_failure_boundary("comeback kings"):
        return await service.comeback_kings(days)


@router.get("/consistency-champions")
async def consistency_champions(
    days: int = Query(30),
    min_scores: int = Query(5, alias="minScores"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> ConsistencyReport:
    with analytics_failure_boundary("consistency champions"):
        if min_scores < 1:
            raise InvalidInputError(f"minScores must be at least 1, got {min_scores}")
        return await service.consistency_champions(days, min_scores)


@router.get("/distribution/{scoring_type}")
async def score_distribution(
    scoring_type: str,
    days: int = Query(30),
    service: AnalyticsService = Depends(get_analytics_service),
) -> DistributionReport:
    with analytics_failure_boundary("score distribution"):
        try:
            parsed = ScoringType(scoring_type)
        except ValueError:
            raise InvalidInputError(f"Unknown scoring type: {scoring_type}") from None
        return await service.score_distribution(parsed, days)


@router.get("/photo-finish")
async def photo_finish(
    day: date | None = Query(None, alias="date"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> PhotoFinishReport:
    with analytics_failure_boundary("photo finishes"):
        return await service.photo_finishes(day)


@router.get("/player-temperature/{player_name}")
async def player_temperature(
    player_name: str,
    days: int = Query(7),
    service: AnalyticsService = Depends(get_analytics_service),
) -> PlayerTemperatureReport:
    with analytics_failure_boundary("player temperature"):
        return await service.player_temperature(player_name, days)
