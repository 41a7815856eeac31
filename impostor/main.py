"""
FastAPI main application entry point
卧底猜词游戏主应用入口
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager

from impostor import __version__
from impostor.core.config import settings
from impostor.core.exceptions import RoomError
from impostor.core.store import init_store, close_store
from impostor.api.v1.api import api_router
from impostor.middleware.request_logging import LoggingMiddleware
import logging
import os

# Configure logging
log_level = getattr(logging, settings.LOG_LEVEL.upper())
log_format = settings.LOG_FORMAT

handlers = [logging.StreamHandler()]
if settings.LOG_TO_FILE:
    log_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs')
    os.makedirs(log_dir, exist_ok=True)
    handlers.append(logging.FileHandler(os.path.join(log_dir, 'app.log'), encoding='utf-8'))

logging.basicConfig(level=log_level, format=log_format, handlers=handlers)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting impostor word game service...")
    await init_store()
    logger.info("Application startup completed")

    yield

    logger.info("Shutting down application...")
    await close_store()
    logger.info("Application shutdown completed")


app = FastAPI(
    title="Impostor",
    description="Impostor word game - party game played through a shared room code",
    version=__version__,
    lifespan=lifespan,
    redirect_slashes=False
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RoomError)
async def room_error_handler(request: Request, exc: RoomError):
    """Room errors are returned as plain text with their status code"""
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        return PlainTextResponse("Invalid JSON.", status_code=400)

    fields = ", ".join(".".join(str(part) for part in e.get("loc", ())[1:]) or "body" for e in errors)
    return PlainTextResponse(f"Invalid request: {fields}", status_code=400)


# Same routes at the root and under /api
app.include_router(api_router)
app.include_router(api_router, prefix="/api", include_in_schema=False)


@app.get("/")
async def root():
    return {
        "message": "Impostor word game API",
        "status": "running",
        "version": __version__
    }
