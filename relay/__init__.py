"""
Public API for the feed media relay.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from relay.http_client import FeedClient
from relay.media_relay import MediaRelay
from relay.models import CycleResult, MediaType, Record
from relay.pipeline import CycleCoordinator
from relay.scheduler import CycleScheduler
from relay.settings import ConfigError, RelaySettings, load_settings
from relay.status import build_status
from relay.store import RecordStore

__all__ = [
    "ConfigError",
    "CycleResult",
    "MediaType",
    "Record",
    "RelayService",
    "RelaySettings",
    "build_service",
    "load_settings",
]


@dataclass
class RelayService:
    settings: RelaySettings
    store: RecordStore
    feed_client: FeedClient
    media_relay: MediaRelay
    coordinator: CycleCoordinator
    scheduler: CycleScheduler

    def run_cycle(self) -> CycleResult:
        return self.scheduler.trigger()

    def load_items(self) -> List[Record]:
        return self.store.load()

    def load_items_newest_first(self) -> Tuple[List[Record], int]:
        """Store contents in reverse insertion order, plus the item count."""
        items = self.store.load()
        return list(reversed(items)), len(items)

    def status(self) -> Dict[str, Any]:
        return build_status(self.coordinator, self.settings, self.feed_client)


def build_service(settings: Optional[RelaySettings] = None) -> RelayService:
    """Wire every component from settings (loaded from the environment if omitted)."""
    settings = settings or load_settings()
    store = RecordStore(settings.data_file_path)
    feed_client = FeedClient(
        headers=settings.feed_headers(),
        timeout=settings.request_timeout,
        secret_values=settings.secret_values(),
    )
    media_relay = MediaRelay(
        upload_url=settings.upload_url,
        request_timeout=settings.request_timeout,
        upload_timeout=settings.upload_timeout,
        user_agent=settings.user_agent,
    )
    coordinator = CycleCoordinator(store, feed_client, media_relay, settings.source_urls)
    scheduler = CycleScheduler(coordinator, settings.interval_seconds)
    return RelayService(
        settings=settings,
        store=store,
        feed_client=feed_client,
        media_relay=media_relay,
        coordinator=coordinator,
        scheduler=scheduler,
    )
