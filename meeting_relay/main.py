from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meeting_relay.logging import configure_logging
from meeting_relay.settings import Settings, get_settings

from meeting_relay.api.routes_health import router as health_router
from meeting_relay.api.routes_webhook import router as webhook_router

logger = logging.getLogger(__name__)

CORS_METHODS = ("GET", "POST", "OPTIONS")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    # Validate configuration and fail fast if critical errors found
    settings.validate_and_fail_fast()

    app = FastAPI(title="Meeting Relay Service", docs_url="/docs", redoc_url=None)
    app.dependency_overrides[get_settings] = lambda: settings

    allow_headers = ["Content-Type", *settings.signature_headers()]
    cors_headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
        "Access-Control-Allow-Headers": ", ".join(allow_headers),
    }

    # Answers preflight requests and echoes CORS headers when an Origin is sent.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=list(CORS_METHODS),
        allow_headers=allow_headers,
    )

    @app.middleware("http")
    async def always_cors(request: Request, call_next):
        response = await call_next(request)
        for name, value in cors_headers.items():
            response.headers.setdefault(name, value)
        return response

    # Runs outside every middleware, so it sets the CORS headers itself.
    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(exc) or exc.__class__.__name__},
            headers=cors_headers,
        )

    app.include_router(health_router)
    app.include_router(webhook_router)
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT, log_config=None)


app = create_app()


if __name__ == "__main__":
    run()
