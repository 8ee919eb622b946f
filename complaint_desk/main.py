from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from complaint_desk.api.middleware import register_middlewares
from complaint_desk.api.v1.router import router as api_v1_router
from complaint_desk.backend import CollectionClient, create_client
from complaint_desk.config.logging import get_logger, setup_logging
from complaint_desk.config.settings import Settings, settings

logger = get_logger(__name__)


def create_app(
    client: Optional[CollectionClient] = None,
    config: Settings = settings,
) -> FastAPI:
    """
    Application factory for the FastAPI app.
    - Configures title, version, debug mode from Settings.
    - Registers CORS and request middlewares.
    - Includes the versioned API router under /api/v1.
    - Opens the collection client on startup unless one is injected.
    """
    app = FastAPI(
        title=config.APP_NAME,
        debug=config.DEBUG,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.client = client

    origins = config.CORS_ORIGINS or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middlewares(app)

    app.include_router(api_v1_router, prefix=config.API_V1_STR)

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {"status": "ok", "backend": config.BACKEND}

    @app.on_event("startup")
    async def on_startup() -> None:
        setup_logging(config)
        if app.state.client is None:
            app.state.client = await create_client(config)
        logger.info(
            f"{config.APP_NAME} {config.API_VERSION} started "
            f"({config.ENVIRONMENT}, backend={config.BACKEND})"
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.client is not None:
            await app.state.client.close()
        logger.info(f"{config.APP_NAME} stopped")

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    uvicorn.run(
        "complaint_desk.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )


if __name__ == "__main__":
    run()
