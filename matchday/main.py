"""Matchday API - team scheduling with live availability"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routes import matches, predictions, teams, websocket
from .routes.deps import store, today_watcher

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.app_name}...")
    store.initialize()
    today_watcher.on_change = websocket.manager.broadcast_today
    today_watcher.start()
    yield
    logger.info(f"Shutting down {settings.app_name}...")
    await today_watcher.stop()
    store.close()


app = FastAPI(
    title=settings.app_name,
    description="Teams, matches and who can play",
    version="0.1.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


app.include_router(teams.router, prefix="/teams", tags=["teams"])
app.include_router(matches.router, prefix="/teams", tags=["matches"])
app.include_router(predictions.router, prefix="/teams", tags=["predictions"])
app.include_router(websocket.router, tags=["sync"])


@app.get("/health")
async def health():
    return {"status": "healthy", "today": today_watcher.today.isoformat()}
