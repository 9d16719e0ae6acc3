#!/usr/bin/env python3
"""
test_feed.py

Unit tests for household.feed (HTTP stubbed) and household.io settings.
"""

import os
import unittest
import sys
from pathlib import Path
from unittest import mock

import requests

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from household.feed import FeedError, fetch_rows
from household.io import build_settings, load_settings


def _response(payload=None, status=200, json_error=False):
    r = mock.Mock()
    r.status_code = status
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    else:
        r.raise_for_status.return_value = None
    if json_error:
        r.json.side_effect = ValueError("Expecting value")
    else:
        r.json.return_value = payload
    return r


class TestFetchRows(unittest.TestCase):

    @mock.patch("household.feed.requests.get")
    def test_returns_rows(self, get):
        get.return_value = _response([{"日付": "2025-06-01"}, "junk", {"日付": "2025-06-02"}])
        rows = fetch_rows(" https://example.test/exec ", timeout=5)

        self.assertEqual(rows, [{"日付": "2025-06-01"}, {"日付": "2025-06-02"}])
        args, kwargs = get.call_args
        self.assertEqual(args[0], "https://example.test/exec")
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(kwargs["headers"]["Cache-Control"], "no-store")

    @mock.patch("household.feed.requests.get")
    def test_http_error(self, get):
        get.return_value = _response(status=500)
        with self.assertRaises(FeedError):
            fetch_rows("https://example.test/exec")

    @mock.patch("household.feed.requests.get")
    def test_connection_error(self, get):
        get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(FeedError):
            fetch_rows("https://example.test/exec")

    @mock.patch("household.feed.requests.get")
    def test_non_json(self, get):
        get.return_value = _response(json_error=True)
        with self.assertRaises(FeedError):
            fetch_rows("https://example.test/exec")

    @mock.patch("household.feed.requests.get")
    def test_non_array_payload(self, get):
        get.return_value = _response({"error": "not published"})
        with self.assertRaises(FeedError):
            fetch_rows("https://example.test/exec")

    def test_empty_url(self):
        with self.assertRaises(FeedError):
            fetch_rows("  ")


class TestSettings(unittest.TestCase):

    def test_build_settings(self):
        s = build_settings(" https://example.test/exec ", output_dir="out", port="9000")
        self.assertEqual(s.feed_url, "https://example.test/exec")
        self.assertEqual(s.charts_dir, Path("out") / "charts")
        self.assertEqual(s.tables_dir, Path("out") / "tables")
        self.assertEqual(s.port, 9000)

    @mock.patch("household.io.load_env_file")
    def test_load_settings_from_env(self, _load_env):
        env = {
            "LEDGER_FEED_URL": "https://example.test/exec",
            "LEDGER_ADJUSTMENTS_JSON": "state/adj.json",
            "LEDGER_FEED_TIMEOUT": "12",
            "DASH_PORT": "8123",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            s = load_settings()
        self.assertEqual(s.feed_url, "https://example.test/exec")
        self.assertEqual(s.adjustments_path, Path("state/adj.json"))
        self.assertEqual(s.feed_timeout, 12.0)
        self.assertEqual(s.port, 8123)
        self.assertEqual(s.host, "127.0.0.1")

    @mock.patch("household.io.load_env_file")
    def test_missing_feed_url(self, _load_env):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValueError):
                load_settings()
            s = load_settings(require_feed=False)
        self.assertEqual(s.feed_url, "")


if __name__ == "__main__":
    unittest.main(verbosity=2)
