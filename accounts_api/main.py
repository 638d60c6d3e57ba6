import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounts_api.api.router import router as api_router
from accounts_api.core.config import settings
from accounts_api.core.exceptions import register_exception_handlers
from accounts_api.core.http_hardening import GRAPHQL_PATH, install_http_hardening
from accounts_api.graphql.schema import graphql_router


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(title=settings.APP_NAME, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_http_hardening(app)
    register_exception_handlers(app)

    app.include_router(graphql_router, prefix=GRAPHQL_PATH)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    def landing():
        return JSONResponse({"service": settings.APP_NAME, "status": "ok"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
