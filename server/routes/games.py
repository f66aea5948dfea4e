"""Game endpoints. Writes require an admin token."""

import logging

from fastapi import APIRouter, Depends, Response, status

from db.database import Database
from errors import InvalidInputError, NotFoundError
from models import Game, GameCreate, GameUpdate
from server.dependencies import get_db, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/games", tags=["games"])


@router.get("")
async def list_games(db: Database = Depends(get_db)) -> list[Game]:
    return await db.list_games()


@router.get("/all", dependencies=[Depends(require_admin)])
async def list_all_games(db: Database = Depends(get_db)) -> list[Game]:
    """Active and soft-deleted games, for the admin panel."""
    return await db.list_games(active_only=False)


@router.get("/{game_id}")
async def get_game(game_id: int, db: Database = Depends(get_db)) -> Game:
    game = await db.get_game(game_id)
    if not game or not game.is_active:
        raise NotFoundError(f"Game {game_id} not found")
    return game


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_game(payload: GameCreate, db: Database = Depends(get_db)) -> Game:
    game = await db.create_game(
        name=payload.name.strip(),
        description=payload.description,
        scoring_type=payload.scoring_type,
        is_active=payload.is_active,
    )
    logger.info(f"Created game {game.id} ({game.name}, {game.scoring_type.value})")
    return game


@router.put("/{game_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def update_game(game_id: int, payload: GameUpdate, db: Database = Depends(get_db)) -> Response:
    if payload.id != game_id:
        raise InvalidInputError("Game id in body does not match the URL")

    await db.update_game(
        game_id,
        name=payload.name.strip(),
        description=payload.description,
        is_active=payload.is_active,
        scoring_type=payload.scoring_type,
        expected_version=payload.version,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_game(game_id: int, db: Database = Depends(get_db)) -> Response:
    """Soft delete: the game is hidden but its scores are kept."""
    if not await db.deactivate_game(game_id):
        raise NotFoundError(f"Game {game_id} not found")
    logger.info(f"Deactivated game {game_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
