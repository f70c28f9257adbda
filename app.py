from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from dotenv import load_dotenv

from body_limit import BodySizeLimitMiddleware
from logging_setup import configure_logging
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("REQUEST INVALID: %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        {"success": False, "message": "Request data is malformed. Send a valid JSON document."},
        status_code=400,
    )


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("UNEXPECTED ERROR: %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        {"success": False, "message": "A server error occurred. Please try again later."},
        status_code=500,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    load_dotenv("local.env")
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    from endpoints.data_endpoints import router as data_router
    from persistence.repositories import AsyncDiskScheduleRepository

    logger.info("DATA FILE: %s (environment=%s)", settings.data_file_path, settings.environment)

    app = FastAPI()
    app.state.settings = settings
    app.state.schedule_repo = AsyncDiskScheduleRepository(settings.data_file_path)

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag"],
    )

    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(data_router)

    # Front-end bundle; mounted last so /api routes take precedence.
    if settings.static_dir is not None:
        if settings.static_dir.is_dir():
            app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        else:
            logger.warning("STATIC: %s is not a directory; front-end not served", settings.static_dir)

    return app


def main() -> None:
    import uvicorn

    uvicorn.run(create_app(), host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "3000")))


if __name__ == "__main__":
    main()
