# ========================================
# app/main.py - ALUMNI NETWORK API
# ========================================

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.database import connect_to_mongo, close_mongo_connection
from app.utils.logger import setup_logging

# ===========================
# IMPORT ALL ROUTERS
# ===========================

# Auth
from app.routes.auth import router as auth_router

# Profiles & Connections
from app.routes.profile import router as profile_router

# Job Board
from app.routes.job import router as job_router

# Feed
from app.routes.posts import router as posts_router
from app.routes.images import router as images_router

# Messaging & Events
from app.routes.messages import router as messages_router
from app.routes.events import router as events_router

load_dotenv()
setup_logging()

logger = logging.getLogger(__name__)

# ===========================
# CREATE FASTAPI APP
# ===========================

app = FastAPI(
    title="Alumni Network API",
    description="Alumni profiles and connections, job board, feed, events and messaging",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ===========================
# CORS MIDDLEWARE
# ===========================
raw_origins = os.getenv("ALLOWED_ORIGINS", "")
origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# DATABASE EVENTS
# ===========================

@app.on_event("startup")
async def start_db():
    """Connect to MongoDB on startup"""
    await connect_to_mongo(app)

@app.on_event("shutdown")
async def stop_db():
    """Close MongoDB connection on shutdown"""
    await close_mongo_connection(app)

# ===========================
# ERROR HANDLING
# ===========================

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# ===========================
# REGISTER ROUTERS
# ===========================

app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(job_router)
app.include_router(posts_router)
app.include_router(images_router)
app.include_router(messages_router)
app.include_router(events_router)

# ===========================
# ROOT ENDPOINTS
# ===========================

@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "status": "Alumni Network API Running",
        "version": "1.0.0",
        "documentation": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "version": "1.0.0"}
