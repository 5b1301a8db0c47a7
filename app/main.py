import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from .core.settings import Settings, get_settings
from app.api.restful.rooms import router as rooms_router
from app.api.ws.signaling import router as signaling_router
from app.api.ws.connection.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format=settings.log_format,
        handlers=handlers,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI server is starting up...")
        app.state.connection_manager.start()
        yield
        logger.info("FastAPI server is shutting down...")
        await app.state.connection_manager.shutdown()

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connection_manager = ConnectionManager(settings)

    # Add CORS middleware with configurable settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

    app.include_router(rooms_router)
    app.include_router(signaling_router)

    @app.get("/health")
    async def health_check():
        logger.info("Health check endpoint accessed")
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/settings")
    async def get_app_settings():
        """Get current application settings (excluding sensitive information)"""
        logger.info("Settings endpoint accessed")
        return {
            "app_name": settings.app_name,
            "app_version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug,
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "room_ttl_seconds": settings.room_ttl_seconds,
            "sweep_interval_seconds": settings.sweep_interval_seconds,
            "require_existing_room": settings.require_existing_room,
            "relay_binary": settings.relay_binary,
        }

    # client assets are served at the site root; mounted last so API routes match first
    if os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.debug(f"Static directory {settings.static_dir} not found, client assets not served")

        @app.get("/")
        async def root():
            logger.info("Root endpoint accessed")
            return {"message": f"Welcome to {settings.app_name}", "status": "running"}

    return app


configure_logging(get_settings())
app = create_app()

if __name__ == "__main__":
    settings = get_settings()
    logger.info("Starting server with Uvicorn...")
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
