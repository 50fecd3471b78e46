"""
High-level orchestration of one processing cycle.

fetch every source -> flatten -> dedupe against the store -> relay new media
one post at a time -> commit the batch once.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional, Protocol, Sequence, Set

from relay.models import CycleResult, IdentityKey, Record
from relay.posts import flatten_documents, media_type_for_link, parse_candidate
from relay.store import RecordStore

logger = logging.getLogger(__name__)

MAX_FETCH_WORKERS = 8


class FeedFetcher(Protocol):
    def fetch(self, url: str) -> Optional[Any]:
        ...


class Relay(Protocol):
    def relay(self, media_url: str) -> Optional[str]:
        ...


class CycleCoordinator:
    def __init__(
        self,
        store: RecordStore,
        feed_client: FeedFetcher,
        media_relay: Relay,
        source_urls: Sequence[str],
    ) -> None:
        self.store = store
        self.feed_client = feed_client
        self.media_relay = media_relay
        self.source_urls = list(source_urls)
        self._running = threading.Lock()
        self.last_result: Optional[CycleResult] = None

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def run(self) -> CycleResult:
        """Run one cycle, or return a skipped result if one is already running."""
        if not self._running.acquire(blocking=False):
            logger.warning("Processing cycle already in progress. Skipping.")
            return CycleResult.skipped()

        logger.info("Starting processing cycle...")
        try:
            result = self._run_cycle()
        except Exception as exc:
            logger.error("Unhandled exception in processing cycle: %s", exc, exc_info=True)
            result = CycleResult.failed()
        finally:
            self._running.release()
            logger.info("Processing cycle finished.")

        self.last_result = result
        return result

    def _run_cycle(self) -> CycleResult:
        existing = self.store.load()
        seen: Set[IdentityKey] = {record.identity_key for record in existing}
        logger.info("Initialized duplicate check set with %d existing posts.", len(seen))

        posts = flatten_documents(self._fetch_all())
        logger.info("Total posts fetched across all sources: %d. Processing...", len(posts))

        batch: List[Record] = []
        for raw in posts:
            record = self._process_post(raw, seen)
            if record is None:
                continue
            batch.append(record)
            seen.add(record.identity_key)

        if batch:
            if not self.store.save([*existing, *batch]):
                logger.error("Could not persist %d new items; they will be retried next cycle.", len(batch))
                return CycleResult.failed("Processing cycle could not save the data file.")
        else:
            logger.info("No new supported media posts found. Data file not modified.")

        return CycleResult(
            success=True,
            new_items_added=len(batch),
            total_items_in_file=len(existing) + len(batch),
            posts_checked_this_cycle=len(posts),
            message="Processing complete.",
        )

    def _fetch_all(self) -> List[Any]:
        if not self.source_urls:
            logger.warning("No source URLs configured")
            return []
        max_workers = min(MAX_FETCH_WORKERS, len(self.source_urls))
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="feed-fetch") as executor:
            return list(executor.map(self.feed_client.fetch, self.source_urls))

    def _process_post(self, raw: Any, seen: Set[IdentityKey]) -> Optional[Record]:
        candidate = parse_candidate(raw)
        if candidate is None:
            return None
        media_type = media_type_for_link(candidate.link)
        if media_type is None or candidate.identity_key in seen:
            return None

        logger.info(
            "Found new post: Title='%s', Author='%s', Link='%s'",
            candidate.title,
            candidate.author,
            candidate.link,
        )
        relay_url = self.media_relay.relay(candidate.link)
        if not relay_url:
            return None
        return Record(
            title=candidate.title,
            author=candidate.author,
            relay_url=relay_url,
            original_url=candidate.link,
            media_type=media_type,
        )
