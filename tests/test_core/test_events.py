"""Unit tests for loading recorded events from HAR and JSON Lines files."""

import json
import tempfile
import unittest
from pathlib import Path

from netsieve.core.events import (
    event_from_har_entry,
    load_events,
    write_events_jsonl,
)
from netsieve.core.exceptions import EventParseError, EventWriteError
from netsieve.core.models import RequestEvent


def har_entry(url, method="GET", status=200, time=120.5):
    return {
        "time": time,
        "request": {
            "method": method,
            "url": url,
            "headers": [{"name": "Accept", "value": "application/json"}],
            "postData": {"mimeType": "application/json", "text": '{"a": 1}'},
        },
        "response": {
            "status": status,
            "headers": [{"name": "X-Response-Time", "value": "118"}],
            "content": {"size": 2, "text": "{}"},
        },
    }


class TestHarLoading(unittest.TestCase):
    """Test HAR 1.2 conversion."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_entry_conversion(self):
        event = event_from_har_entry(har_entry("https://api.example.com/users", method="POST", status=201))

        self.assertEqual(event.url, "https://api.example.com/users")
        self.assertEqual(event.method, "POST")
        self.assertEqual(event.status, 201)
        self.assertEqual(event.duration_ms, 120.5)
        self.assertEqual(event.request.header("accept"), "application/json")
        self.assertEqual(event.request.body, '{"a": 1}')
        self.assertEqual(event.response.body, "{}")

    def test_unknown_time(self):
        event = event_from_har_entry(har_entry("https://example.com/", time=-1))

        self.assertIsNone(event.duration_ms)
        self.assertEqual(event.resolved_duration_ms, 118.0)

    def test_entry_without_url(self):
        with self.assertRaises(EventParseError):
            event_from_har_entry({"request": {}, "response": {}})

    def test_entry_with_non_object_request_or_response(self):
        for entry in ({"request": "GET /", "response": {}}, {"request": {"url": "/a"}, "response": [200]}):
            with self.assertRaises(EventParseError):
                event_from_har_entry(entry)

    def test_malformed_optional_parts_are_skipped(self):
        entry = {
            "request": {"url": "https://example.com/", "headers": 5, "postData": "raw"},
            "response": {"status": 200, "headers": "none", "content": None},
        }

        event = event_from_har_entry(entry)

        self.assertEqual(event.request.headers, {})
        self.assertIsNone(event.request.body)
        self.assertEqual(event.response.headers, {})
        self.assertIsNone(event.response.body)

    def test_load_har_file(self):
        path = self.root / "session.har"
        path.write_text(json.dumps({
            "log": {
                "version": "1.2",
                "entries": [
                    har_entry("https://example.com/api/users"),
                    har_entry("https://cdn.example.com/app.js"),
                ],
            }
        }))

        events = load_events(path)

        self.assertEqual(len(events), 2)
        self.assertEqual(events[1].url, "https://cdn.example.com/app.js")

    def test_har_without_entries(self):
        path = self.root / "session.har"
        path.write_text(json.dumps({"log": {}}))

        with self.assertRaises(EventParseError):
            load_events(path)

    def test_invalid_har_json(self):
        path = self.root / "session.har"
        path.write_text("{not json")

        with self.assertRaises(EventParseError):
            load_events(path)


class TestJsonlLoading(unittest.TestCase):
    """Test JSON Lines loading and writing."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_load_jsonl(self):
        path = self.root / "events.jsonl"
        path.write_text(
            '{"url": "/api/users", "method": "GET", "status": 200}\n'
            "\n"
            '{"url": "/app.js", "method": "GET", "status": 404, "duration_ms": 30}\n'
        )

        events = load_events(path)

        self.assertEqual(len(events), 2)
        self.assertEqual(events[1].status, 404)
        self.assertEqual(events[1].duration_ms, 30.0)

    def test_invalid_line(self):
        path = self.root / "events.ndjson"
        path.write_text('{"url": "/a"}\n{broken\n')

        with self.assertRaises(EventParseError) as ctx:
            load_events(path)
        self.assertIn("line 2", str(ctx.exception))

    def test_non_object_line(self):
        path = self.root / "events.jsonl"
        path.write_text("[1, 2]\n")

        with self.assertRaises(EventParseError):
            load_events(path)

    def test_invalid_status(self):
        path = self.root / "events.jsonl"
        path.write_text('{"url": "/a", "status": "ok"}\n')

        with self.assertRaises(EventParseError):
            load_events(path)

    def test_unsupported_suffix(self):
        path = self.root / "events.csv"
        path.write_text("url\n/a\n")

        with self.assertRaises(EventParseError):
            load_events(path)

    def test_missing_file(self):
        with self.assertRaises(EventParseError):
            load_events(self.root / "missing.jsonl")

    def test_write_then_load(self):
        events = [
            RequestEvent(url="/api/users", method="POST", status=201, duration_ms=40.0),
            RequestEvent(url="/api/items", method="GET", status=200),
        ]

        path = write_events_jsonl(events, self.root / "out" / "kept.jsonl")

        self.assertEqual(load_events(path), events)

    def test_write_failure(self):
        blocker = self.root / "blocker"
        blocker.write_text("not a directory")

        with self.assertRaises(EventWriteError):
            write_events_jsonl([RequestEvent(url="/api/users")], blocker / "kept.jsonl")


if __name__ == "__main__":
    unittest.main()
