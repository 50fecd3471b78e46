import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from relay.http_client import FeedClient
from relay.pipeline import CycleCoordinator
from relay.settings import RelaySettings
from relay.status import build_status
from relay.store import RecordStore

SOURCE_OK = "https://feeds.example.com/ok.json"
SOURCE_DOWN = "https://feeds.example.com/down.json"
SOURCE_NEW = "https://feeds.example.com/new.json"


class StatusTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = RelaySettings(
            api_key="key-1234",
            api_secret="secret-5678",
            xsrf_token="xsrf-9999",
            source_urls=[SOURCE_OK, SOURCE_DOWN, SOURCE_NEW],
            data_file_path=Path(self._tmp.name) / "data.json",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_status_reports_cycle_sources_and_config(self):
        session = requests.Session()
        feed_client = FeedClient(self.settings.feed_headers(), session=session)
        ok = MagicMock(status_code=200)
        ok.json.return_value = []
        with patch.object(session, "get", return_value=ok):
            feed_client.fetch(SOURCE_OK)
        with patch.object(session, "get", side_effect=requests.ConnectionError("refused")):
            with self.assertLogs("relay.http_client", level="ERROR"):
                feed_client.fetch(SOURCE_DOWN)

        feeds = MagicMock()
        feeds.fetch.return_value = []
        coordinator = CycleCoordinator(RecordStore(self.settings.data_file_path), feeds, MagicMock(), [SOURCE_OK])
        coordinator.run()

        status = build_status(coordinator, self.settings, feed_client)

        self.assertFalse(status["cycle"]["running"])
        self.assertTrue(status["cycle"]["last_result"]["success"])
        sources = {entry["name"]: entry for entry in status["sources"]}
        self.assertTrue(sources[SOURCE_OK]["healthy"])
        self.assertFalse(sources[SOURCE_DOWN]["healthy"])
        self.assertIsNone(sources[SOURCE_NEW]["healthy"])
        self.assertFalse(status["store"]["exists"])
        self.assertNotIn("secret-5678", str(status))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
