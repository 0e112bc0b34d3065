"""CORS configuration for the web client + FastAPI integration."""
from fastapi.middleware.cors import CORSMiddleware
import os

# Get environment configuration
ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# Base allowed origins for development (React dev server and Vite)
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]

# Add production frontend URL if provided
if FRONTEND_URL and FRONTEND_URL not in ALLOWED_ORIGINS:
    ALLOWED_ORIGINS.append(FRONTEND_URL)


def add_cors_middleware(app):
    """Add CORS middleware to the FastAPI application."""
    # Production only trusts the configured frontend
    origins = [FRONTEND_URL] if ENVIRONMENT == "production" else ALLOWED_ORIGINS
    print(f"[CORS] Environment: {ENVIRONMENT}, allowed origins: {origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
