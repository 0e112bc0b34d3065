"""Main FastAPI application for the Family Navigator records backend."""
from fastapi import FastAPI
from app.middleware.cors import add_cors_middleware
from app.middleware.error_handler import add_error_handlers
from app.db.init import init_db

# Create FastAPI application
app = FastAPI(
    title="Family Navigator Records API",
    description="REST API for family-law case records: communications, documents, incidents, calendar and AI conversations",
    version="1.0.0",
    contact={
        "name": "Family Navigator Development Team",
    },
)

# Add CORS middleware
add_cors_middleware(app)

# Map service errors to JSON responses
add_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    try:
        init_db()
        print("[SUCCESS] Database tables initialized successfully.")
    except Exception as e:
        print(f"[WARNING] Database initialization failed: {str(e)}")
        print("[WARNING] Server will continue but database operations may fail.")
        print("[WARNING] Please check your DATABASE_URL and network connection.")

    print("[SUCCESS] Application startup complete.")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the Family Navigator Records API",
        "title": "Family Navigator Records API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Import and include routers
from app.routers import (  # noqa: E402
    audit,
    auth,
    calendar,
    children,
    communications,
    contacts,
    conversations,
    documents,
    incidents,
)
app.include_router(auth.router, prefix="/auth")  # Auth endpoints: /auth/sign-up, /auth/sign-in
app.include_router(children.router, prefix="/api")  # /api/{user_id}/children
app.include_router(communications.router, prefix="/api")  # /api/{user_id}/communications
app.include_router(contacts.router, prefix="/api")  # /api/{user_id}/contacts
app.include_router(documents.router, prefix="/api")  # /api/{user_id}/documents
app.include_router(incidents.router, prefix="/api")  # /api/{user_id}/incidents
app.include_router(calendar.router, prefix="/api")  # /api/{user_id}/calendar
app.include_router(conversations.router, prefix="/api")  # /api/{user_id}/conversations
app.include_router(audit.router, prefix="/api")  # /api/{user_id}/audit-logs

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
