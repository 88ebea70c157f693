"""
API routers for the new-tab dashboard backend.

Each router handles a specific domain:
- dashboard: Schedule, history and weather for the new-tab page
- auth: Google Calendar connection state
"""

from .dashboard import router as dashboard_router
from .auth import router as auth_router

__all__ = [
    'dashboard_router',
    'auth_router',
]
