import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from aione.config import get_settings, is_backend_configured
from aione.dependencies import build_services
from aione.routers.assistant import router as assistant_router
from aione.routers.auth import router as auth_router
from aione.routers.chatbot import router as chatbot_router
from aione.routers.scrape import limiter, router as scrape_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="AIOne – AI Modules API",
    description=(
        "Website element extractor, chatbot builder backed by Gemini, and "
        "Supabase-backed authentication with per-module history."
    ),
    version="1.0.0",
)

settings = get_settings()
app.state.services = build_services(settings)
if not is_backend_configured(settings):
    logger.warning("Supabase is not properly configured; auth and history endpoints will return 503")

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(scrape_router)
app.include_router(chatbot_router)
app.include_router(assistant_router)
app.include_router(auth_router)


@app.get("/", summary="Health check")
async def root(request: Request) -> dict:
    services = request.app.state.services
    return {
        "message": "Hello from AIOne",
        "backend_configured": services.auth.configured,
        "gemini_configured": services.gateway.configured,
    }
