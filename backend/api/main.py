"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import address
from settings import settings

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create app
app = FastAPI(
    title="Address Lookup API",
    description="Address autocomplete and normalization for record forms",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(address.router, prefix="/address", tags=["address"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Address Lookup API"}


@app.get("/health")
async def health():
    """Health check endpoint, also reporting which lookup mode is active."""
    return {
        "status": "healthy",
        "lookup_mode": "remote" if settings.remote_lookup_enabled else "fallback",
    }
