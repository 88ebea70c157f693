"""
Dashboard module for the new-tab page.

Provides calendar aggregation, browsing-history classification, the
refresh pipeline and scheduler, and Rich formatting.
"""

from .aggregator import EventAggregator, day_bounds
from .history import (
    HistoryClassifier,
    canonicalize_url,
    display_title,
    host_matches,
    is_non_content,
    mark_unavailable,
)
from .service import DashboardService
from .refresher import RefreshJob, RefreshScheduler
from .formatter import DashboardFormatter

__all__ = [
    # Aggregator
    'EventAggregator',
    'day_bounds',
    # History
    'HistoryClassifier',
    'canonicalize_url',
    'display_title',
    'host_matches',
    'is_non_content',
    'mark_unavailable',
    # Pipeline
    'DashboardService',
    'RefreshJob',
    'RefreshScheduler',
    # Formatter
    'DashboardFormatter',
]
