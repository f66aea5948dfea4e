"""Score endpoints: submission, leaderboards, admin edits and images."""

from datetime import date

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from pydantic import ValidationError

from config import Config
from db.database import Database
from errors import InvalidInputError, NotFoundError
from models import GameScore, ScoreCreate, ScoreUpdate
from server.dependencies import get_db, get_score_service, require_admin
from server.services.image_service import make_thumbnail
from server.services.score_service import ScoreService

router = APIRouter(prefix="/api/gamescores", tags=["scores"])


@router.get("")
async def list_scores(db: Database = Depends(get_db)) -> list[GameScore]:
    return await db.list_scores()


@router.get("/game/{game_id}")
async def scores_for_game(
    game_id: int,
    service: ScoreService = Depends(get_score_service),
) -> list[GameScore]:
    return await service.ranked_scores(game_id)


@router.get("/game/{game_id}/leaderboard")
async def leaderboard(
    game_id: int,
    top: int = Query(10, ge=1, le=1000),
    service: ScoreService = Depends(get_score_service),
) -> list[GameScore]:
    return await service.ranked_scores(game_id, top)


@router.get("/game/{game_id}/leaderboard/day")
async def daily_leaderboard(
    game_id: int,
    day: date | None = Query(None, alias="date"),
    top: int = Query(10, ge=1, le=1000),
    service: ScoreService = Depends(get_score_service),
) -> list[GameScore]:
    return await service.daily_leaderboard(game_id, day, top)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_score(
    payload: ScoreCreate,
    service: ScoreService = Depends(get_score_service),
) -> GameScore:
    return await service.submit_score(payload)


@router.post("/with-image", status_code=status.HTTP_201_CREATED)
async def submit_score_with_image(
    game_id: int = Form(...),
    player_name: str = Form(...),
    guess_count: int | None = Form(None),
    completion_time: str | None = Form(None),
    profile_url: str | None = Form(None),
    score_image: UploadFile | None = File(None),
    service: ScoreService = Depends(get_score_service),
) -> GameScore:
    try:
        payload = ScoreCreate(
            game_id=game_id,
            player_name=player_name,
            guess_count=guess_count,
            completion_time=completion_time or None,
            profile_url=profile_url,
        )
    except ValidationError as e:
        raise InvalidInputError(str(e)) from e

    if score_image is None:
        return await service.submit_score(payload)

    # At most one byte past the size limit
    data = await score_image.read(Config.MAX_IMAGE_BYTES + 1)
    return await service.submit_score(payload, image=data, image_content_type=score_image.content_type)


@router.get("/{score_id}")
async def get_score(score_id: int, service: ScoreService = Depends(get_score_service)) -> GameScore:
    return await service.get_score(score_id)


@router.put("/{score_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def update_score(
    score_id: int,
    payload: ScoreUpdate,
    service: ScoreService = Depends(get_score_service),
) -> Response:
    await service.update_score(score_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{score_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
async def delete_score(score_id: int, service: ScoreService = Depends(get_score_service)) -> Response:
    await service.delete_score(score_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{score_id}/image")
async def get_score_image(score_id: int, db: Database = Depends(get_db)) -> Response:
    image = await db.get_score_image(score_id)
    if not image:
        raise NotFoundError(f"Score {score_id} has no image")
    data, content_type = image
    return Response(content=data, media_type=content_type)


@router.get("/{score_id}/image/thumbnail")
async def get_score_thumbnail(
    score_id: int,
    width: int = Query(200, ge=1, le=2000),
    height: int = Query(200, ge=1, le=2000),
    db: Database = Depends(get_db),
) -> Response:
    image = await db.get_score_image(score_id)
    if not image:
        raise NotFoundError(f"Score {score_id} has no image")
    data, content_type = make_thumbnail(image[0], width, height)
    return Response(content=data, media_type=content_type)
