import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from relaykit.http.config import ClientConfig, load_client_config, make_transport
from relaykit.http.httpx import HttpxTransport
from relaykit.http.requests import RequestsTransport


class LoadClientConfigTest(unittest.TestCase):
    def _load(self, data):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump(data, f)
            f.flush()
        try:
            return load_client_config(f.name)
        finally:
            Path(f.name).unlink()

    def test_missing_file_returns_defaults(self):
        config = load_client_config("/nonexistent/path/config.json")
        self.assertEqual(config, ClientConfig())
        self.assertEqual(config.max_concurrent, 5)
        self.assertEqual(config.transport, "requests")
        self.assertEqual(config.expected_mime_type, "application/json")

    def test_valid_config(self):
        config = self._load(
            {
                "max_concurrent": 8,
                "transport": "httpx",
                "headers": {"Accept": "application/json", "X-Retry": 0},
                "timeout": 30,
                "log_failures": True,
                "expected_mime_type": "text/html",
            }
        )
        self.assertEqual(config.max_concurrent, 8)
        self.assertEqual(config.transport, "httpx")
        self.assertEqual(config.headers, {"Accept": "application/json", "X-Retry": "0"})
        self.assertEqual(config.timeout, 30.0)
        self.assertTrue(config.log_failures)
        self.assertEqual(config.expected_mime_type, "text/html")

    def test_partial_config(self):
        config = self._load({"timeout": 2.5})
        self.assertEqual(config.timeout, 2.5)
        self.assertEqual(config.max_concurrent, 5)
        self.assertEqual(config.headers, {})

    def test_invalid_max_concurrent_raises(self):
        for value in (0, -3, "5", True):
            with self.assertRaises(ValueError):
                self._load({"max_concurrent": value})

    def test_unknown_transport_raises(self):
        with self.assertRaises(ValueError) as cm:
            self._load({"transport": "urllib"})
        self.assertIn("Unknown transport", str(cm.exception))

    def test_invalid_json_raises(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("not valid json{")
            f.flush()
            with self.assertRaises(json.JSONDecodeError):
                load_client_config(f.name)
        Path(f.name).unlink()


class MakeTransportTest(unittest.TestCase):
    def test_requests(self):
        transport = make_transport("requests", max_concurrent=3, client_name="Test")
        self.assertIsInstance(transport, RequestsTransport)
        self.assertTrue(transport.session.headers["User-Agent"].endswith(" Test"))
        transport.close()

    def test_httpx(self):
        with patch("relaykit.http.httpx.transport.create_client") as mock_create:
            transport = make_transport("httpx", max_concurrent=3)
        self.assertIsInstance(transport, HttpxTransport)
        mock_create.assert_called_once_with(max_connections=3, client_name=None)

    def test_unknown(self):
        with self.assertRaises(ValueError):
            make_transport("curl")


if __name__ == "__main__":
    unittest.main()
