"""
FastAPI application entry point for the DooTopia API.
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dootopia_api.auth import require_auth
from dootopia_api.config import get_settings
from dootopia_api.documents import InvalidDocumentId, InvalidUpdate
from dootopia_api.routes import router

logger = logging.getLogger(__name__)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


async def _bad_request(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="DooTopia API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(InvalidDocumentId, _bad_request)
    app.add_exception_handler(InvalidUpdate, _bad_request)

    dependencies = [Depends(require_auth)] if settings.auth_required else []
    app.include_router(router, prefix=settings.api_prefix, dependencies=dependencies)

    @app.get("/")
    def read_root():
        return {"message": "DooTopia API running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info("Starting DooTopia API on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
