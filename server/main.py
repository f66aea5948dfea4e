"""Main entry point for the Puzzlescores API."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Config
from db.database import Database
from errors import ConcurrencyConflictError, InvalidInputError, NotFoundError
from server.routes import admin, analytics, games, scores, stats

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(database: Database | None = None) -> FastAPI:
    """Build the API.

    When ``database`` is given it is used as-is and left open on shutdown;
    otherwise the app opens ``DATABASE_PATH`` for its own lifetime.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_db = app.state.db is None
        if owns_db:
            app.state.db = Database(Config.DATABASE_PATH)
            await app.state.db.connect()
            logger.info(f"Connected to database: {Config.DATABASE_PATH}")
            if Config.SEED_DEFAULT_GAMES:
                await app.state.db.seed_default_games()

        yield

        if owns_db:
            logger.info("Shutting down...")
            await app.state.db.close()
            app.state.db = None

    app = FastAPI(
        title="Puzzlescores",
        description="Leaderboards and analytics for daily puzzle games",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(NotFoundError)
    async def not_found(_request: Request, _exc: NotFoundError):
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    @app.exception_handler(InvalidInputError)
    async def invalid_input(_request: Request, exc: InvalidInputError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(ConcurrencyConflictError)
    async def conflict(_request: Request, exc: ConcurrencyConflictError):
        return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_409_CONFLICT)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/test")
    async def test():
        return "API is working!"

    for module in (games, scores, analytics, stats, admin):
        app.include_router(module.router)

    return app


app = create_app()


def main():
    """Main entry point."""
    uvicorn.run(app, host=Config.API_HOST, port=Config.API_PORT, log_level=Config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
