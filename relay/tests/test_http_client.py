import unittest
from unittest.mock import MagicMock, patch

import requests

from relay.http_client import FeedClient

SOURCE = "https://feeds.example.com/api/v2/post/newv2.json?community=test"
HEADERS = {
    "accept": "application/json, text/plain, */*",
    "x-api-key": "key-1234",
    "x-api-secret": "secret-5678",
    "x-xsrf-token": "xsrf-9999",
}


def _response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = payload
    return resp


class FeedClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = requests.Session()
        self.client = FeedClient(
            headers=HEADERS,
            timeout=7,
            secret_values=["key-1234", "secret-5678", "xsrf-9999"],
            session=self.session,
        )

    def test_sends_fixed_headers_and_timeout(self):
        self.assertEqual(self.session.headers["x-api-key"], "key-1234")
        self.assertEqual(self.session.headers["x-xsrf-token"], "xsrf-9999")
        with patch.object(self.session, "get", return_value=_response(payload=[])) as mock_get:
            self.client.fetch(SOURCE)
        mock_get.assert_called_once_with(SOURCE, timeout=7)

    def test_returns_decoded_document_and_marks_source_healthy(self):
        payload = {"posts": [{"title": "t"}]}
        with patch.object(self.session, "get", return_value=_response(payload=payload)):
            self.assertEqual(self.client.fetch(SOURCE), payload)

        health = self.client.health()[SOURCE]
        self.assertTrue(health.healthy)
        self.assertEqual(health.status_code, 200)
        self.assertIsNotNone(health.last_success)

    def test_auth_failure_is_flagged_and_redacted(self):
        resp = _response(status_code=403, text='{"error": "bad key key-1234"}')
        with patch.object(self.session, "get", return_value=resp):
            with self.assertLogs("relay.http_client", level="ERROR") as logs:
                self.assertIsNone(self.client.fetch(SOURCE))

        joined = "\n".join(logs.output)
        self.assertIn("Check API credentials", joined)
        self.assertNotIn("key-1234", joined)
        health = self.client.health()[SOURCE]
        self.assertFalse(health.healthy)
        self.assertIn("auth failure", health.last_error)

    def test_server_error_returns_none(self):
        with patch.object(self.session, "get", return_value=_response(status_code=502, text="bad gateway")):
            with self.assertLogs("relay.http_client", level="ERROR") as logs:
                self.assertIsNone(self.client.fetch(SOURCE))
        self.assertNotIn("Check API credentials", "\n".join(logs.output))
        self.assertEqual(self.client.health()[SOURCE].last_error, "HTTP 502")

    def test_network_failures_return_none(self):
        for exc in (requests.Timeout("slow"), requests.ConnectionError("refused")):
            with self.subTest(exc=type(exc).__name__):
                with patch.object(self.session, "get", side_effect=exc):
                    with self.assertLogs("relay.http_client", level="ERROR"):
                        self.assertIsNone(self.client.fetch(SOURCE))
                self.assertFalse(self.client.health()[SOURCE].healthy)

    def test_malformed_json_returns_none(self):
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        with patch.object(self.session, "get", return_value=resp):
            with self.assertLogs("relay.http_client", level="ERROR"):
                self.assertIsNone(self.client.fetch(SOURCE))
        self.assertEqual(self.client.health()[SOURCE].last_error, "malformed JSON")

    def test_failure_keeps_last_success_time(self):
        with patch.object(self.session, "get", return_value=_response(payload=[])):
            self.client.fetch(SOURCE)
        first_success = self.client.health()[SOURCE].last_success

        with patch.object(self.session, "get", side_effect=requests.Timeout("slow")):
            with self.assertLogs("relay.http_client", level="ERROR"):
                self.client.fetch(SOURCE)
        self.assertEqual(self.client.health()[SOURCE].last_success, first_success)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
