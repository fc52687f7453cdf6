"""Loading recorded network events from disk.

Supported formats:
- HAR 1.2 (``.har``): ``log.entries``, with the entry ``time`` as duration
- JSON Lines (``.jsonl``, ``.ndjson``): one event mapping per line, in the
  shape accepted by RequestEvent.from_dict
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator

from netsieve.core.exceptions import EventParseError, EventWriteError
from netsieve.core.models import HttpMessage, RequestEvent


logger = logging.getLogger(__name__)

HAR_SUFFIXES = {".har"}
JSONL_SUFFIXES = {".jsonl", ".ndjson"}


def _har_headers(entries: Any) -> dict[str, str]:
    headers: dict[str, str] = {}
    if not isinstance(entries, list):
        return headers
    for header in entries:
        if isinstance(header, dict) and "name" in header:
            headers[str(header["name"])] = str(header.get("value", ""))
    return headers


def event_from_har_entry(entry: dict[str, Any]) -> RequestEvent:
    """Convert one HAR entry to a RequestEvent.

    Args:
        entry: HAR ``log.entries`` item

    Returns:
        RequestEvent

    Raises:
        EventParseError: If the entry has no request URL or its request or
            response is not an object
    """
    request = entry.get("request") or {}
    response = entry.get("response") or {}
    if not isinstance(request, dict) or not isinstance(response, dict):
        raise EventParseError("HAR entry request and response must be objects")

    url = request.get("url")
    if not url:
        raise EventParseError("HAR entry has no request URL")

    post_data = request.get("postData")
    if not isinstance(post_data, dict):
        post_data = {}
    content = response.get("content")
    if not isinstance(content, dict):
        content = {}

    # HAR uses -1 for unknown timings and status 0 for aborted requests
    duration = entry.get("time")
    if not isinstance(duration, (int, float)) or duration < 0:
        duration = None

    status = response.get("status")

    return RequestEvent(
        url=str(url),
        method=request.get("method"),
        status=int(status) if isinstance(status, (int, float)) else None,
        request=HttpMessage(
            headers=_har_headers(request.get("headers")),
            body=post_data.get("text"),
        ),
        response=HttpMessage(
            headers=_har_headers(response.get("headers")),
            body=content.get("text"),
        ),
        duration_ms=float(duration) if duration is not None else None,
    )


def iter_har_events(path: Path) -> Iterator[RequestEvent]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise EventParseError(f"Failed to parse HAR file {path}: {e}") from e
    except OSError as e:
        raise EventParseError(f"Failed to read HAR file {path}: {e}") from e

    try:
        entries = data["log"]["entries"]
    except (KeyError, TypeError) as e:
        raise EventParseError(f"HAR file {path} has no log.entries") from e

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise EventParseError(f"HAR entry {index} in {path} is not an object")
        yield event_from_har_entry(entry)


def iter_jsonl_events(path: Path) -> Iterator[RequestEvent]:
    try:
        with path.open("r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    data = json.loads(line)
                except json.JSONDecodeError as e:
                    raise EventParseError(
                        f"Invalid JSON on line {line_number} of {path}: {e}"
                    ) from e

                if not isinstance(data, dict):
                    raise EventParseError(
                        f"Line {line_number} of {path} is not a JSON object"
                    )

                try:
                    yield RequestEvent.from_dict(data)
                except (TypeError, ValueError) as e:
                    raise EventParseError(
                        f"Invalid event on line {line_number} of {path}: {e}"
                    ) from e
    except OSError as e:
        raise EventParseError(f"Failed to read events file {path}: {e}") from e


def load_events(events_file: Path | str) -> list[RequestEvent]:
    """Load recorded events from a HAR or JSON Lines file.

    Args:
        events_file: Path to a ``.har``, ``.jsonl`` or ``.ndjson`` file

    Returns:
        List of RequestEvent in file order

    Raises:
        EventParseError: If the file is missing, has an unsupported suffix,
            or contains malformed events
    """
    path = Path(events_file)

    if not path.exists():
        raise EventParseError(f"Events file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in HAR_SUFFIXES:
        events = list(iter_har_events(path))
    elif suffix in JSONL_SUFFIXES:
        events = list(iter_jsonl_events(path))
    else:
        raise EventParseError(
            f"Unsupported events file type '{suffix}'. Use .har, .jsonl or .ndjson"
        )

    logger.info(f"Loaded {len(events)} events from {path}")
    return events


def write_events_jsonl(events: list[RequestEvent], output_file: Path | str) -> Path:
    """Write events as JSON Lines, one RequestEvent.to_dict per line.

    Raises:
        EventWriteError: If the output file cannot be written
    """
    path = Path(output_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for event in events:
                f.write(json.dumps(event.to_dict(), ensure_ascii=False))
                f.write("\n")
    except OSError as e:
        raise EventWriteError(f"Failed to write events to {path}: {e}") from e
    return path
