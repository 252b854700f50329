import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.future import select
from sqlalchemy import update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.exceptions import (
    BadRequestError,
    ConflictError,
    GameNotFoundError,
    StoreError,
)
from app.models import Game, GameCreate, GameUpdate, as_utc, utc_now
from app.settings import settings

logger = logging.getLogger(__name__)


def next_update_timestamp(previous: datetime) -> datetime:
    """
    Timestamp for an update that is strictly later than the previous one,
    even when the clock has not advanced (or went backwards).
    """
    now = utc_now()
    previous = as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class GameService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_game(self, data: GameCreate) -> Game:
        """
        Insert a new game and return the row as stored.
        """
        now = utc_now()
        game = Game(
            title=data.title,
            console=data.console,
            rating=data.rating,
            complete=data.complete,
            created=now,
            updated=now,
        )
        try:
            self.session.add(game)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Insert rejected by database: {e.orig}")
            raise BadRequestError(f"unable to write to database: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Insert failed: {e}", exc_info=True)
            raise StoreError(f"unable to write to database: {e}") from e

        # Re-read so the caller gets the canonical stored values
        await self._reload(game, "game was created but could not be read back")
        logger.info(f"Created game {game.id} ({game.title!r} on {game.console!r})")
        return game

    async def get_game(self, game_id: int) -> Game:
        game = await self._fetch_game(game_id)
        if game is None:
            raise GameNotFoundError()
        return game

    async def list_games(self) -> List[Game]:
        """All games, ascending by id. Empty list when there are none."""
        stmt = select(Game).order_by(Game.id)
        return await self._fetch_all(stmt, "unable to retrieve games at this time")

    async def list_games_by_console(self, console: str) -> List[Game]:
        """
        Games whose console equals the given value, ascending by id.
        Case-insensitive when CONSOLE_FILTER_CASE_SENSITIVE is off.
        """
        if settings.CONSOLE_FILTER_CASE_SENSITIVE:
            condition = Game.console == console
        else:
            condition = func.lower(Game.console) == console.lower()

        stmt = select(Game).where(condition).order_by(Game.id)
        return await self._fetch_all(
            stmt, f"unable to retrieve games for console {console!r}"
        )

    async def update_game(self, game_id: int, data: GameUpdate) -> Game:
        """
        Overwrite the fields present in `data`. id and created are kept,
        updated is moved forward. The write only applies if nobody else
        changed the row since it was read.
        """
        game = await self._fetch_game(game_id)
        if game is None:
            raise GameNotFoundError()

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated"] = next_update_timestamp(game.updated)
        expected_version = game.version
        changes["version"] = expected_version + 1

        stmt = (
            update(Game)
            .where(Game.id == game_id, Game.version == expected_version)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                logger.warning(
                    f"Update of game {game_id} lost a race (version {expected_version})"
                )
                raise ConflictError("game was modified concurrently, please retry")
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Update of game {game_id} rejected by database: {e.orig}")
            raise BadRequestError(f"unable to write to database: {e.orig}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Update of game {game_id} failed: {e}", exc_info=True)
            raise StoreError(f"unable to update game: {e}") from e

        await self._reload(game, "game was updated but could not be read back")
        logger.info(f"Updated game {game_id} (fields: {sorted(changes)})")
        return game

    async def delete_game(self, game_id: int) -> None:
        stmt = delete(Game).where(Game.id == game_id)
        try:
            result = await self.session.execute(stmt)
            deleted = result.rowcount
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Delete of game {game_id} failed: {e}", exc_info=True)
            raise StoreError(f"unable to delete game: {e}") from e

        if deleted == 0:
            raise GameNotFoundError()

        logger.info(f"Deleted game {game_id}")

    async def _fetch_game(self, game_id: int) -> Optional[Game]:
        try:
            # populate_existing so a cached instance never hides the stored row
            return await self.session.get(Game, game_id, populate_existing=True)
        except SQLAlchemyError as e:
            logger.error(f"Lookup of game {game_id} failed: {e}", exc_info=True)
            raise StoreError(f"unable to retrieve game: {e}") from e

    async def _reload(self, game: Game, error_message: str) -> None:
        try:
            await self.session.refresh(game)
        except SQLAlchemyError as e:
            logger.error(f"{error_message}: {e}", exc_info=True)
            raise StoreError(f"{error_message}: {e}") from e

    async def _fetch_all(self, stmt, error_message: str) -> List[Game]:
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"{error_message}: {e}", exc_info=True)
            raise StoreError(f"{error_message}: {e}") from e
