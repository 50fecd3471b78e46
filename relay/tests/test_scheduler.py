import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from relay import ConfigError, build_service
from relay.models import CycleResult, MediaType, Record
from relay.scheduler import JOB_ID, CycleScheduler
from relay.settings import RelaySettings


class CycleSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.coordinator = MagicMock()
        self.coordinator.run.return_value = CycleResult(success=True)
        self.backend = MagicMock()
        self.backend.running = True
        self.scheduler = CycleScheduler(self.coordinator, interval_seconds=45, scheduler=self.backend)

    def test_start_runs_first_cycle_immediately(self):
        self.scheduler.start()

        args, kwargs = self.backend.add_job.call_args
        self.assertEqual(args[1], "interval")
        self.assertEqual(kwargs["seconds"], 45)
        self.assertEqual(kwargs["id"], JOB_ID)
        self.assertEqual(kwargs["max_instances"], 1)
        self.assertIn("next_run_time", kwargs)
        self.backend.start.assert_called_once()

    def test_start_without_immediate_run_leaves_default_first_run(self):
        self.scheduler.start(run_immediately=False)
        self.assertNotIn("next_run_time", self.backend.add_job.call_args.kwargs)

    def test_job_and_trigger_run_the_coordinator(self):
        self.scheduler.start()
        job = self.backend.add_job.call_args.args[0]
        job()
        self.assertTrue(self.scheduler.trigger().success)
        self.assertEqual(self.coordinator.run.call_count, 2)

    def test_shutdown_stops_running_scheduler(self):
        self.scheduler.shutdown()
        self.backend.shutdown.assert_called_once_with(wait=False)


class BuildServiceTests(unittest.TestCase):
    def test_wires_components_from_settings(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = RelaySettings(
                api_key="key-1234",
                api_secret="secret-5678",
                xsrf_token="xsrf-9999",
                source_urls=["https://feeds.example.com/a.json"],
                upload_url="https://upload.example.com/up",
                data_file_path=Path(tmp) / "data.json",
                request_timeout=11,
                upload_timeout=222,
            )
            service = build_service(settings)

            self.assertEqual(service.feed_client.timeout, 11)
            self.assertEqual(service.feed_client.session.headers["x-api-key"], "key-1234")
            self.assertNotIn("x-api-key", service.media_relay.session.headers)
            self.assertEqual(service.media_relay.upload_timeout, 222)
            self.assertEqual(service.coordinator.source_urls, ["https://feeds.example.com/a.json"])

            records = [
                Record(title=t, author="a", relay_url="r", original_url="o", media_type=MediaType.IMAGE)
                for t in ("one", "two")
            ]
            service.store.save(records)
            newest, count = service.load_items_newest_first()
            self.assertEqual(count, 2)
            self.assertEqual([r.title for r in newest], ["two", "one"])

    def test_missing_environment_raises_config_error(self):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                build_service()


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
