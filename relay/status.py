"""
Status/health helpers for the relay service.

The output is designed for API/UI consumption and never carries credentials.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from relay.http_client import FeedClient
from relay.pipeline import CycleCoordinator
from relay.settings import RelaySettings


def build_status(
    coordinator: CycleCoordinator,
    settings: RelaySettings,
    feed_client: Optional[FeedClient] = None,
) -> Dict[str, Any]:
    last = coordinator.last_result
    health = feed_client.health() if feed_client is not None else {}
    sources = []
    for url in settings.source_urls:
        entry = health.get(url)
        sources.append(entry.to_dict() if entry else {"name": url, "healthy": None})
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "cycle": {
            "running": coordinator.is_running,
            "last_result": last.to_dict() if last else None,
        },
        "sources": sources,
        "store": {
            "path": str(coordinator.store.path),
            "exists": coordinator.store.path.exists(),
        },
        "config": settings.public_view(),
    }
