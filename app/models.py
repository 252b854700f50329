from sqlmodel import SQLModel, Field
from pydantic import field_validator
from typing import Optional
from datetime import datetime, timezone
import math


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def finite_rating(value: Optional[float]) -> Optional[float]:
    # json.loads accepts Infinity and NaN, which are not JSON
    if value is not None and not math.isfinite(value):
        raise ValueError("rating must be a finite number")
    return value


class GameBase(SQLModel):
    title: str = ""
    console: str = Field(default="", index=True)
    rating: float = 0
    complete: bool = False


class Game(GameBase, table=True):
    __tablename__ = "games"
    # Never hand out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)

    # Read-only after insert
    created: datetime = Field(default_factory=utc_now)
    updated: datetime = Field(default_factory=utc_now)

    # Bumped on every write, checked by UPDATE ... WHERE version = ?
    version: int = Field(default=1)


class GameCreate(GameBase):
    @field_validator("rating")
    @classmethod
    def check_rating(cls, value: Optional[float]) -> Optional[float]:
        return finite_rating(value)


class GameUpdate(SQLModel):
    title: Optional[str] = None
    console: Optional[str] = None
    rating: Optional[float] = None
    complete: Optional[bool] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, value: Optional[float]) -> Optional[float]:
        return finite_rating(value)


class GameRead(GameBase):
    id: int
    created: datetime
    updated: datetime

    @field_validator("created", "updated")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
