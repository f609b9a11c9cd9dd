"""
Ticketwise Event Ticketing - FastAPI Backend
Main application entry point
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from app.core.config import settings
from app.core.db import engine, Base
from app.core.errors import TicketingError
from app.api import routes_admin, routes_events, routes_orders, routes_public, routes_tickets
from app.utils.responses import error_response

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
    yield
    logger.info("Application shutdown")

# Create FastAPI application
app = FastAPI(
    title="Ticketwise Event Ticketing",
    description="Backend for event ticket sales, order review and QR check-in",
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

@app.exception_handler(TicketingError)
async def ticketing_error_handler(request: Request, exc: TicketingError):
    """Render domain errors with the standard error body"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
        status_code=exc.status_code
    )

# Mount uploaded event images; receipts stay behind /orders/receipts
event_images_dir = os.path.join(settings.UPLOAD_DIR, "events_profile")
os.makedirs(event_images_dir, exist_ok=True)
app.mount("/uploads/events_profile", StaticFiles(directory=event_images_dir), name="event_images")

# Include routers
app.include_router(routes_public.router, tags=["public"])
app.include_router(routes_events.router, tags=["events"])
app.include_router(routes_orders.router, prefix="/orders", tags=["orders"])
app.include_router(routes_tickets.router, prefix="/tickets", tags=["tickets"])
app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])

# Note: Run this ASGI app directly with Uvicorn or Hypercorn. For Gunicorn,
# use `uvicorn.workers.UvicornWorker` instead of wrapping the app.

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="127.0.0.1",
        port=8000,
        reload=True
    )
