"""
New-tab dashboard FastAPI backend

This is the main entry point for the API server that feeds the browser's
new-tab page.

Architecture:
- FastAPI handles HTTP routing and response validation
- Pydantic schemas ensure type safety
- DashboardService runs the calendar, history and weather refreshes
- The page polls each endpoint on its own timer

Run with:
    uvicorn backend.main:app --reload --port 8000

Or:
    python -m backend.main
"""

import sys
from pathlib import Path
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from backend.routers import dashboard_router, auth_router
from backend.dependencies import get_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: load configuration and report where it came from.
    """
    config = get_config()
    print(f"Config loaded from: {config.config_dir}")
    print(f"History database: {config.get_history_db_path()}")

    yield

    print("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="New Tab Dashboard API",
    description="""
    Personal new-tab dashboard API.

    ## Features

    - **Schedule**: Today's and tomorrow's events merged across every visible Google calendar
    - **History**: Recent ChatGPT, Claude and Gemini conversations from browser history
    - **Weather**: Current temperature with today's high, low and chance of rain
    - **Auth**: Connect or disconnect Google Calendar
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for the extension page and local dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^(chrome-extension://.*|http://(localhost|127\.0\.0\.1)(:\d+)?)$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(dashboard_router)
app.include_router(auth_router)


@app.get("/")
async def root():
    """API root - returns basic info and available endpoints."""
    return {
        "name": "New Tab Dashboard API",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "dashboard": "/dashboard/today",
            "schedule": "/dashboard/schedule",
            "history": "/dashboard/history",
            "weather": "/dashboard/weather",
            "auth": "/auth/status",
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    try:
        config = get_config()
        return {
            "status": "healthy",
            "history_database": "found" if config.get_history_db_path().exists() else "missing",
        }
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


# Allow running directly with: python -m backend.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
