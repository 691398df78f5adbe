"""
CSRE API Main Application
=========================

FastAPI application entry point for the CSRE REST API.

Features:
    - OpenAPI documentation at /docs
    - Artifact loaded once in the application lifespan
    - Typed engine errors translated to JSON error responses
    - Structured request logging

Usage:
    # Development:
    uvicorn csre.api.main:app --reload

    # Production:
    CSRE_ARTIFACT_PATH=/srv/model.json uvicorn csre.api.main:app --host 0.0.0.0

Author: CSRE Team
Version: 1.0.0
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from csre.config import Settings, settings
from csre.engine.context import EngineContext, load_engine
from csre.engine.errors import EngineError, MalformedArtifact
from csre.logging import setup_logging, get_logger, RequestLoggingMiddleware
from csre.api.routes import health_router, inference_router


logger = get_logger(__name__)

# Caller mistakes are 422; everything else is a data problem on our side
ERROR_STATUS: Dict[str, int] = {
    "invalid_prevalence": 422,
    "invalid_confidence_level": 422,
    "unknown_variable": 422,
    "no_model_match": 500,
}


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    """Render a typed engine error."""
    status_code = ERROR_STATUS.get(exc.kind, 500)
    content = {"error": exc.kind, "detail": str(exc)}
    if isinstance(exc, MalformedArtifact):
        content["problems"] = exc.problems

    if status_code >= 500:
        logger.error("engine_error", kind=exc.kind, detail=str(exc), path=request.url.path)
    else:
        logger.info("request_rejected", kind=exc.kind, detail=str(exc), path=request.url.path)
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    engine: Optional[EngineContext] = None,
    app_settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        engine: Preloaded engine context; loaded from the configured
            artifact at startup when omitted
        app_settings: Settings override

    Returns:
        Configured FastAPI instance
    """
    app_settings = app_settings or settings
    setup_logging(
        level=app_settings.log_level,
        json_output=app_settings.log_json,
        log_file=app_settings.log_file,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting CSRE API...")
        if app.state.engine is None:
            app.state.engine = load_engine(settings=app_settings)
        logger.info("CSRE API started", models=len(app.state.engine.repository))
        yield
        logger.info("CSRE API shutdown complete")

    app = FastAPI(
        title="CSRE API",
        description=(
            "Clinical Subset Risk Estimator API\n\n"
            "Estimates an outcome probability from whichever clinical "
            "variables are available, using the logistic-regression model "
            "fitted on exactly that variable subset.\n\n"
            "Decision support only; not a diagnostic tool."
        ),
        version=app_settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.engine = engine
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(EngineError, engine_error_handler)

    app.include_router(health_router)
    app.include_router(inference_router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint returning API info."""
        return {
            "service": app_settings.app_name,
            "version": app_settings.app_version,
            "description": "Clinical Subset Risk Estimator API",
            "docs": "/docs",
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "csre.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
