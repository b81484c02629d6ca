"""
Wedding RSVP System - FastAPI Backend
Main application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from app.core.config import settings, GUEST_STORES
from app.core.db import engine, Base
from app.core.exceptions import GuestListError
from app.api import routes_admin, routes_guest, routes_public, ws
from app.utils.responses import guest_error_handler

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    if settings.GUEST_STORE not in GUEST_STORES:
        raise RuntimeError(f"Unknown GUEST_STORE {settings.GUEST_STORE!r}; expected one of {', '.join(GUEST_STORES)}")
    if settings.GUEST_STORE == "sql":
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    logger.info(f"Guest store: {settings.GUEST_STORE}")
    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Wedding RSVP System",
    description="Guest lookup, RSVP and guest list administration",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(GuestListError, guest_error_handler)

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_guest.router, prefix="/rsvp", tags=["rsvp"])
app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
app.include_router(ws.router, prefix="/ws", tags=["websocket"])

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True
    )
