"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import geolocation, health, locations, routes
from .config import settings
from .db.supabase import supabase_configured
from .errors import CollectionGeoError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting %s: routes stored in '%s', customers from %s",
        settings.app_name,
        settings.route_storage,
        "Supabase" if supabase_configured() else settings.customer_file,
    )
    yield


async def collection_geo_error_handler(request: Request, exc: CollectionGeoError) -> JSONResponse:
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_exception_handler(CollectionGeoError, collection_geo_error_handler)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "route_storage": settings.route_storage,
            "endpoints": {
                "health": f"{settings.api_prefix}/health",
                "clusters": f"{settings.api_prefix}/geo/clusters",
                "routes": f"{settings.api_prefix}/routes",
            },
            "docs": "/docs",
        }

    for module in (health, geolocation, locations, routes):
        app.include_router(module.router, prefix=settings.api_prefix)
    return app


app = create_app()
