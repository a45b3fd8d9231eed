import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .logging_config import configure_logging
from .database import init_db, get_sessionmaker
from .auth import ensure_default_admin
from .api.health import router as health_router
from .api.auth import router as auth_router
from .api.ambulance import router as ambulance_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(title="Ambulance Dispatch Service", version="0.1.0")

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        logger.error(
            "Store failure on %s %s (request %s)",
            request.method,
            request.url.path,
            getattr(request.state, "request_id", ""),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.on_event("startup")
    def startup() -> None:
        init_db()
        SessionLocal = get_sessionmaker()
        db = SessionLocal()
        try:
            ensure_default_admin(db)
        finally:
            db.close()

    app.include_router(health_router, prefix="/api/v1")
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(ambulance_router, prefix="/api/v1")

    return app


app = create_app()
