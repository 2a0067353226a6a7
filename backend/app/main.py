from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from app.api.routers import chat
from app.core.config import settings
from app.core.errors import ChatError
from app.core.logging import get_logger, setup_logging
from app.schemas.chat import ErrorResponse, HealthResponse
from app.services.registry import RoomRegistry

logger = get_logger(__name__)


def create_app(registry: Optional[RoomRegistry] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)
    if registry is None:
        registry = RoomRegistry(history_limit=settings.message_history_limit)
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    @app.get("/", include_in_schema=False)
    def index() -> FileResponse:
        return FileResponse(settings.index_file, media_type="text/html")

    @app.get("/health", response_model=HealthResponse)
    def healthcheck(request: Request) -> HealthResponse:
        return HealthResponse(status="ok", rooms=len(request.app.state.registry))

    app.include_router(chat.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting %s on %s:%s", settings.app_name, settings.host, settings.port)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
