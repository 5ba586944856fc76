import logging

from fastapi import FastAPI

from bto.api.v1.router import v1_router
from bto.core.config import get_settings
from bto.core.logging import configure_logging
from bto.core.middleware import RequestIdMiddleware
from bto.db.init_db import init_db
from bto.db.session import SessionLocal, engine

logger = logging.getLogger(__name__)


def _load_demo_data() -> None:
    from bto.seed import seed

    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    if settings.auto_create_schema:
        init_db(engine)
    if settings.seed_demo_data:
        _load_demo_data()

    # Middleware: Request ID + access log
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    logger.info(
        "app created",
        extra={"environment": settings.environment, "seeded": settings.seed_demo_data},
    )
    return app


app = create_app()
