from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from app.database import init_db
from app.exceptions import GameNotFoundError, GameServiceError
from app.routers import games

# We need to import models so SQLModel knows about them before init_db
from app.models import Game  # noqa: F401
import logging
import time
from app.logging_conf import configure_logging

# Configure logging before app startup
configure_logging()
logger = logging.getLogger(__name__)

CREATE_BAD_REQUEST = "unable to create game, please check your data"
UPDATE_BAD_REQUEST = "bad JSON data, please check the update data"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    await init_db()
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Game Catalog", lifespan=lifespan)


@app.exception_handler(GameServiceError)
async def game_service_error_handler(request: Request, exc: GameServiceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.info(
        "Request Rejected",
        extra={
            "method": request.method,
            "url": str(request.url),
            "errors": [
                {"loc": list(e.get("loc", ())), "type": e.get("type")} for e in errors
            ],
        },
    )

    # A path id that is not an integer cannot name any game
    if any(e.get("loc", ())[:1] == ("path",) for e in errors):
        not_found = GameNotFoundError()
        return JSONResponse(
            status_code=not_found.status_code, content={"error": not_found.message}
        )

    message = CREATE_BAD_REQUEST if request.method == "POST" else UPDATE_BAD_REQUEST
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": message}
    )


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start_time = time.time()

    try:
        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            "Incoming Request",
            extra={
                "method": request.method,
                "url": str(request.url),
                "status_code": response.status_code,
                "duration": f"{process_time:.4f}s",
                "client": request.client.host if request.client else None,
            },
        )
        return response
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "Request Failed",
            exc_info=True,
            extra={
                "method": request.method,
                "url": str(request.url),
                "duration": f"{process_time:.4f}s",
                "client": request.client.host if request.client else None,
            },
        )
        raise e


app.include_router(games.router)


@app.get("/")
async def root():
    return {"message": "Game Catalog is running"}
