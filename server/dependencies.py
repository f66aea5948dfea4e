"""FastAPI dependencies shared by the routers."""

import logging
from contextlib import contextmanager

from fastapi import Depends, Header, HTTPException, Request, status

from db.database import Database
from errors import PuzzlescoresError
from server.services.analytics_service import AnalyticsService
from server.services.auth_service import is_valid_admin_token
from server.services.score_service import ScoreService
from server.services.stats_service import StatsService

logger = logging.getLogger(__name__)


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_analytics_service(db: Database = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_stats_service(db: Database = Depends(get_db)) -> StatsService:
    return StatsService(db)


def get_score_service(db: Database = Depends(get_db)) -> ScoreService:
    return ScoreService(db)


async def require_admin(authorization: str | None = Header(default=None)) -> None:
    """Reject the request unless it carries a valid admin bearer token."""
    if not authorization:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header missing")

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not is_valid_admin_token(token.strip()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


@contextmanager
def analytics_failure_boundary(action: str):
    """Turn any unexpected fault in a computation into a single 500 response.

    Application errors (bad input, missing rows) pass through to their own
    handlers.
    """
    try:
        yield
    except PuzzlescoresError:
        raise
    except Exception as e:
        logger.exception(f"Error calculating {action}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error calculating {action}: {e}",
        ) from e
