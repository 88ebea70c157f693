"""
Dependency injection for FastAPI endpoints.

Provides singleton instances of Config and DashboardService to be used
across all API routes. The service is shared so that a token invalidated
by one request is not handed out again to the next.
"""

from functools import lru_cache
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from newtab.core.config import Config
from newtab.dashboard.service import DashboardService


@lru_cache()
def get_config() -> Config:
    """
    Get cached Config instance.

    lru_cache ensures we only create one Config instance
    for the lifetime of the application.
    """
    return Config()


@lru_cache()
def get_dashboard_service() -> DashboardService:
    """Get the shared DashboardService."""
    return DashboardService.from_config(get_config())
