import uuid
from contextlib import asynccontextmanager
from time import time
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Settings
from app.db.db import create_db_engine, init_db
from app.errors import ErrorKind, LostFoundError
from app.matching.dispatcher import MatchDispatcher
from app.routers import assets, claims, items, notifications
from app.services.notification_service import NotificationService
from app.utils.logging_config import get_logger, set_request_id, setup_logging

load_dotenv()

logger = get_logger(__name__)

# error kind -> HTTP status
ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ITEM_NOT_OPEN: 409,
    ErrorKind.ALREADY_DECIDED: 409,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.INVALID_INPUT: 400,
}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(level=settings.LOG_LEVEL, json_fmt=settings.LOG_JSON)

    engine = create_db_engine(settings.DATABASE_URL)
    notifier = NotificationService(engine)
    dispatcher = MatchDispatcher(
        engine,
        notifier,
        policy=settings.scoring_policy(),
        max_workers=settings.MATCH_WORKERS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("startup database=%s match_workers=%d", engine.url.get_backend_name(), settings.MATCH_WORKERS)
        yield
        dispatcher.shutdown(wait=True)
        engine.dispose()
        logger.info("shutdown complete")

    app = FastAPI(title="Campus Lost & Found API", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.notifier = notifier
    app.state.dispatcher = dispatcher

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        set_request_id(rid)

        start = time()
        logger.info("REQ start %s %s", request.method, request.url.path)

        response = await call_next(request)

        duration = (time() - start) * 1000
        logger.info("REQ end %s %s status=%s %.1fms", request.method, request.url.path, response.status_code, duration)

        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(LostFoundError)
    async def handle_domain_error(request: Request, exc: LostFoundError):
        status = ERROR_STATUS[exc.kind]
        logger.info("request_failed kind=%s status=%d detail=%s", exc.kind.value, status, exc.message)
        return JSONResponse(
            status_code=status,
            content={"error": exc.kind.value, "detail": exc.message},
        )

    # Register routers
    app.include_router(items.router, prefix="/items", tags=["Items"])
    app.include_router(claims.router, prefix="/claims", tags=["Claims"])
    app.include_router(assets.router, prefix="/assets", tags=["Assets"])
    app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])

    @app.get("/")
    def root():
        return {"status": "ok"}

    return app


app = create_app()
