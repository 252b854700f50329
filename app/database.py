from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy import text, inspect
import logging
import os
from app.settings import settings

logger = logging.getLogger(__name__)

# Ensure the directory of a file-backed SQLite database exists
if settings.DATABASE_URL.startswith("sqlite+aiosqlite:///"):
    db_dir = os.path.dirname(settings.DATABASE_URL.replace("sqlite+aiosqlite:///", ""))
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)


engine = create_async_engine(
    settings.DATABASE_URL, echo=settings.DATABASE_ECHO, future=True
)
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def migrate_db(connection):
    """
    Check for missing columns on an existing 'games' table and add them.
    """

    def do_inspect(conn):
        inspector = inspect(conn)
        if not inspector.has_table("games"):
            return None
        return [c["name"] for c in inspector.get_columns("games")]

    column_names = await connection.run_sync(do_inspect)
    if column_names is None:
        return

    if "version" not in column_names:
        logger.info("Migrating DB: Adding 'version' column to 'games' table.")
        await connection.execute(
            text("ALTER TABLE games ADD COLUMN version INTEGER NOT NULL DEFAULT 1")
        )


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
        await migrate_db(conn)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session
