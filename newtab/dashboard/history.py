"""
Browsing-history classification for the new-tab dashboard.

Partitions a raw history stream by service, reduces each URL to
origin + path, drops non-content pages, and keeps the first occurrence of
every canonical URL up to a per-service limit.

Input is trusted to be newest-first (the browser's history search returns
it that way); set assume_ordered_by_recency=False to have the classifier
order each partition by visit time itself before deduplicating.
"""

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple
from urllib.parse import SplitResult, urlsplit

from newtab.core.models import (
    CanonicalHistoryItem,
    HISTORY_UNAVAILABLE,
    HistoryEntry,
    ServiceDefinition,
    ServiceHistory,
)

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_PATH_MARKERS = ("/login", "/auth", "/settings", "/recents")
DEFAULT_TITLE_MAX_LENGTH = 35
TRUNCATION_MARKER = "..."
UNTITLED = "Untitled"

DEFAULT_PORTS = {"http": 80, "https": 443}


def canonicalize_url(parts: SplitResult) -> str:
    """
    Origin + path of a split URL, without query string or fragment.

    Raises:
        ValueError: no scheme or host, or an invalid port
    """
    host = parts.hostname
    if not parts.scheme or not host:
        raise ValueError(f"not an absolute URL: {parts.geturl()!r}")

    scheme = parts.scheme.lower()
    port = parts.port
    origin = f"{scheme}://{host}"
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        origin += f":{port}"
    return origin + (parts.path or "/")


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True if host is one of the domains or a subdomain of one."""
    host = host.lower()
    return any(
        host == domain.lower() or host.endswith("." + domain.lower())
        for domain in domains
    )


def is_non_content(
    canonical_url: str,
    markers: Sequence[str],
    exclude_root_paths: bool = True,
) -> bool:
    """Home pages (trailing slash) and login/auth/settings/recents style pages."""
    if exclude_root_paths and canonical_url.endswith("/"):
        return True
    return any(marker in canonical_url for marker in markers)


@lru_cache(maxsize=64)
def _compile_suffix(pattern: str) -> Optional[Pattern]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.warning(f"Ignoring invalid title suffix pattern {pattern!r}: {e}")
        return None


def display_title(
    title: Optional[str],
    suffix_pattern: Optional[str] = None,
    max_length: int = DEFAULT_TITLE_MAX_LENGTH,
) -> str:
    """Strip the service-name suffix and cap the length."""
    text = title or ""
    if suffix_pattern:
        compiled = _compile_suffix(suffix_pattern)
        if compiled is not None:
            text = compiled.sub("", text)
    text = text.strip() or UNTITLED

    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER
    return text


def mark_unavailable(services: Sequence[ServiceDefinition]) -> Dict[str, ServiceHistory]:
    """Outcome for every service when the history log could not be read."""
    return {service.id: HISTORY_UNAVAILABLE for service in services}


class HistoryClassifier:
    """
    Splits browsing history into per-service canonical item lists.

    Exclusion markers and title length are configuration; a service may
    carry its own marker list, which replaces the global one.
    """

    def __init__(
        self,
        excluded_path_markers: Sequence[str] = DEFAULT_EXCLUDED_PATH_MARKERS,
        exclude_root_paths: bool = True,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        assume_ordered_by_recency: bool = True,
    ):
        self.excluded_path_markers = tuple(excluded_path_markers)
        self.exclude_root_paths = exclude_root_paths
        self.title_max_length = title_max_length
        self.assume_ordered_by_recency = assume_ordered_by_recency

    def classify(
        self,
        raw_history: Sequence[HistoryEntry],
        services: Sequence[ServiceDefinition],
        window: Tuple[datetime, datetime],
        per_service_limit: int,
    ) -> Dict[str, List[CanonicalHistoryItem]]:
        """
        Classify history for every service independently.

        Args:
            raw_history: History entries, newest first
            services: Services in display order
            window: (start, end) visit-time range, both inclusive
            per_service_limit: Maximum items per service

        Returns:
            Mapping of service id to its ordered item list (possibly empty)
        """
        return {
            service.id: self.classify_service(raw_history, service, window, per_service_limit)
            for service in services
        }

    def classify_service(
        self,
        raw_history: Sequence[HistoryEntry],
        service: ServiceDefinition,
        window: Tuple[datetime, datetime],
        per_service_limit: int,
    ) -> List[CanonicalHistoryItem]:
        candidates = self._candidates(raw_history, service, window)
        if not self.assume_ordered_by_recency:
            candidates.sort(key=lambda pair: pair[0].last_visit_time, reverse=True)

        markers = (
            service.excluded_path_markers
            if service.excluded_path_markers is not None
            else self.excluded_path_markers
        )

        items: List[CanonicalHistoryItem] = []
        seen = set()
        for entry, canonical_url in candidates:
            if len(items) >= per_service_limit:
                break
            if is_non_content(canonical_url, markers, self.exclude_root_paths):
                continue
            if canonical_url in seen:
                continue
            seen.add(canonical_url)
            items.append(CanonicalHistoryItem(
                canonical_url=canonical_url,
                display_title=display_title(
                    entry.title, service.title_suffix_pattern, self.title_max_length
                ),
                last_visit_time=entry.last_visit_time,
            ))

        return items

    def _candidates(
        self,
        raw_history: Sequence[HistoryEntry],
        service: ServiceDefinition,
        window: Tuple[datetime, datetime],
    ) -> List[Tuple[HistoryEntry, str]]:
        """Entries inside the window whose host belongs to the service."""
        window_start, window_end = window
        candidates = []
        for entry in raw_history:
            try:
                if not window_start <= entry.last_visit_time <= window_end:
                    continue
                parts = urlsplit(entry.url)
                if not parts.hostname or not host_matches(parts.hostname, service.match_domains):
                    continue
                candidates.append((entry, canonicalize_url(parts)))
            except (ValueError, TypeError, AttributeError) as e:
                logger.debug(f"Dropping malformed history entry {entry!r}: {e}")
        return candidates
