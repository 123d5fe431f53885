import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import socketio

from config import get_settings
from database import engine, Base
import models  # noqa: F401  (registers every table on Base.metadata)
from api.auth import router as auth_router
from api.profile import router as profile_router
from api.posts import router as posts_router
from api.friends import router as friends_router
from api.messages import router as messages_router
from services.media import MediaUploadError
from ws.events import create_sio
from ws.presence import PresenceRegistry

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup — fail fast on missing secrets
    if not settings.JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY is not set. Set it in your .env file.")
    logger.info("Starting PeopleGrid backend...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("PeopleGrid backend ready")
    yield
    # Shutdown
    await engine.dispose()
    logger.info("PeopleGrid backend shut down")


app = FastAPI(
    title="PeopleGrid API",
    description="Profiles, posts, friends and direct messages",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MediaUploadError)
async def media_upload_error_handler(request: Request, exc: MediaUploadError):
    logger.error(f"Media upload failed on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": "Media upload failed."})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Server error."})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Covers driver errors SQLAlchemy does not wrap, e.g. a refused pool connection
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Server error."})


# REST routes
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(posts_router)
app.include_router(friends_router)
app.include_router(messages_router)

# Real-time channel
presence = PresenceRegistry()
sio = create_sio(presence, cors_allowed_origins=[settings.FRONTEND_URL, "http://localhost:3000"])
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)


# Health check
@app.get("/health")
async def health():
    return {"status": "ok", "service": "peoplegrid", "online_users": len(presence)}


# Export the ASGI app (uvicorn should point to this)
application = socket_app
