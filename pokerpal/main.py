from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from pokerpal.config import Config
from pokerpal.constants import UploadConstants
from pokerpal.database.database import Database
from pokerpal.routes import admin, auth, clubs, players, registrations, seasons, tournaments, uploads
from pokerpal.services.image_storage import ImageStorage
from pokerpal.utils.exceptions import PokerPalError
from pokerpal.utils.logger import setup_logger

logger = setup_logger(__name__)

ROUTERS = [
    auth.router,
    admin.router,
    clubs.router,
    seasons.router,
    players.router,
    tournaments.router,
    registrations.router,
    uploads.router,
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on start-up and dispose of it on shutdown"""
    logger.info("Starting PokerPal...")
    await app.state.db.initialize()
    logger.info(f"Image uploads stored {'in cloud storage' if app.state.storage.use_cloud else 'on local disk'}")
    try:
        yield
    finally:
        logger.info("Shutting down PokerPal...")
        await app.state.db.close()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PokerPalError)
    async def handle_app_error(request: Request, exc: PokerPalError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_response()))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path} -> 400: invalid request data")
        return JSONResponse(
            status_code=400,
            content={'error': 'Invalid request data', 'details': jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={'error': exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unexpected error in {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={'error': 'Internal server error'})


def create_app(database_url: Optional[str] = None, storage: Optional[ImageStorage] = None) -> FastAPI:
    """
    Build the PokerPal application.

    Args:
        database_url: SQLAlchemy async URL, defaults to Config.DATABASE_URL
        storage: Image storage backend, defaults to one built from Config
    """
    if not Config.SESSION_SECRET:
        logger.warning("SESSION_SECRET is not set; using a random secret, sessions will not survive a restart")

    app = FastAPI(title="PokerPal", lifespan=lifespan)
    app.state.db = Database(database_url)
    app.state.storage = storage or ImageStorage()

    app.add_middleware(
        SessionMiddleware,
        secret_key=Config.get_session_secret(),
        session_cookie=Config.SESSION_COOKIE_NAME,
        max_age=Config.SESSION_MAX_AGE,
        same_site='lax',
        https_only=Config.PRODUCTION,
    )

    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    upload_dir = Path(app.state.storage.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UploadConstants.URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")

    return app


def run():
    """Main entry point"""
    Config.validate()
    uvicorn.run(
        "pokerpal.main:create_app",
        factory=True,
        host=Config.HOST,
        port=Config.PORT,
        log_level="debug" if Config.DEBUG else "info",
    )


if __name__ == "__main__":
    run()
