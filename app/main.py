# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings as default_settings
from .db import Database
from .errors import register_error_handlers
from .log import setup_logging
from .templating import STATIC_DIR

from .routers import (
    drivers as drivers_router,
    weekly as weekly_router,
    pages as pages_router,
    performance as performance_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # storage handle lives for the whole process
        db = Database(settings.DATABASE_URL)
        if settings.AUTO_CREATE_TABLES:
            db.create_all()
        app.state.db = db
        logger.info("database ready (%s)", db.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(title=settings.APP_TITLE, lifespan=lifespan)
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # --- static ---
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    # --- routers ---
    app.include_router(drivers_router.router)
    app.include_router(weekly_router.router)
    app.include_router(pages_router.router)
    app.include_router(performance_router.router)

    @app.get("/healthz", include_in_schema=False)
    def healthz(request: Request):
        request.app.state.db.ping()
        return {"ok": True}

    return app


app = create_app()
