from fastapi import APIRouter, Depends, Path, Response, status
from typing import Annotated, List
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_session
from app.services.game_service import GameService
from app.models import GameCreate, GameRead, GameUpdate

router = APIRouter(prefix="/games", tags=["games"])

# Ids are SQLite INTEGER primary keys; anything outside that range names no game
GameId = Annotated[int, Path(ge=1, le=2**63 - 1)]


def get_game_service(session: AsyncSession = Depends(get_session)) -> GameService:
    return GameService(session)


@router.post("", response_model=GameRead, status_code=status.HTTP_201_CREATED)
async def create_game(
    game: GameCreate, service: GameService = Depends(get_game_service)
):
    """
    Create a new game. id, created and updated in the body are ignored.
    """
    return await service.create_game(game)


@router.get("", response_model=List[GameRead])
async def list_games(service: GameService = Depends(get_game_service)):
    return await service.list_games()


@router.get("/console/{console}", response_model=List[GameRead])
async def list_games_by_console(
    console: str, service: GameService = Depends(get_game_service)
):
    """
    All games for one console. An unknown console gives an empty list.
    """
    return await service.list_games_by_console(console)


@router.get("/{game_id}", response_model=GameRead)
async def get_game(game_id: GameId, service: GameService = Depends(get_game_service)):
    return await service.get_game(game_id)


@router.api_route("/{game_id}", methods=["PUT", "PATCH"], response_model=GameRead)
async def update_game(
    game_id: GameId,
    game: GameUpdate,
    service: GameService = Depends(get_game_service),
):
    """
    Overwrite the writeable fields of a game with the ones sent in the body.
    """
    return await service.update_game(game_id, game)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: GameId, service: GameService = Depends(get_game_service)):
    await service.delete_game(game_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
