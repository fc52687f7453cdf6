"""Core data models for netsieve.

This module defines the data structures shared by the classifier, presets,
loaders and CLI: captured request events, URL patterns, verdicts, and the
classifier configuration together with its builder.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Optional, Sequence, Union

from netsieve.core.constants import (
    DEFAULT_API_PATTERNS,
    DEFAULT_IGNORED_DOMAINS,
    DEFAULT_IGNORED_EXTENSIONS,
    DEFAULTS,
    RESPONSE_TIME_HEADER,
    Rule,
)
from netsieve.core.exceptions import ConfigError, InvalidPatternError


_LEADING_INT = re.compile(r"[+-]?\d+")


# ============================================================================
# URL Patterns
# ============================================================================

@dataclass(frozen=True)
class LiteralPattern:
    """Case-insensitive substring matched against the full URL."""
    text: str

    def matches(self, url: str) -> bool:
        return self.text.lower() in url.lower()


@dataclass(frozen=True)
class RegexPattern:
    """Regular expression searched in the URL as given.

    Matching is case-sensitive unless ``flags`` says otherwise. The
    expression is compiled once, when the pattern is constructed.
    """
    expression: str
    flags: int = 0
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            compiled = re.compile(self.expression, self.flags)
        except re.error as e:
            raise InvalidPatternError(
                f"Invalid regex pattern '{self.expression}': {e}"
            ) from e
        object.__setattr__(self, "compiled", compiled)

    def matches(self, url: str) -> bool:
        return self.compiled.search(url) is not None


Pattern = Union[LiteralPattern, RegexPattern]


def parse_pattern(value: Any) -> Pattern:
    """Convert a user-supplied pattern into a tagged pattern.

    Args:
        value: A pattern object, a plain string (literal), a compiled
            ``re.Pattern``, or a mapping with a ``literal`` or ``regex`` key
            (``ignore_case`` is honored for regexes).

    Returns:
        LiteralPattern or RegexPattern

    Raises:
        InvalidPatternError: If a regex does not compile
        ConfigError: If the value has an unsupported shape
    """
    if isinstance(value, (LiteralPattern, RegexPattern)):
        return value
    if isinstance(value, str):
        return LiteralPattern(value)
    if isinstance(value, re.Pattern):
        return RegexPattern(value.pattern, flags=value.flags)
    if isinstance(value, dict):
        if "regex" in value:
            flags = re.IGNORECASE if value.get("ignore_case") else 0
            return RegexPattern(str(value["regex"]), flags=flags)
        if "literal" in value:
            return LiteralPattern(str(value["literal"]))
    raise ConfigError(f"Unsupported pattern: {value!r}")


def parse_patterns(values: Sequence[Any]) -> tuple[Pattern, ...]:
    """Convert a sequence of user-supplied patterns. See parse_pattern."""
    if isinstance(values, (str, re.Pattern, dict)):
        values = [values]
    return tuple(parse_pattern(value) for value in values)


# ============================================================================
# Request Event Model
# ============================================================================

@dataclass(frozen=True)
class HttpMessage:
    """Headers and body of one side of a request/response exchange."""
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Look up a header value, ignoring header name case."""
        if not isinstance(self.headers, Mapping):
            return None
        wanted = name.lower()
        for key, value in self.headers.items():
            if isinstance(key, str) and key.lower() == wanted:
                return value
        return None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "HttpMessage":
        if not data:
            return cls()
        headers = data.get("headers") or {}
        body = data.get("body")
        return cls(
            headers={str(k): str(v) for k, v in headers.items()},
            body=body if body is None else str(body),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"headers": dict(self.headers), "body": self.body}


@dataclass(frozen=True)
class RequestEvent:
    """One captured network call.

    Produced by the interception layer and never mutated by the classifier.
    ``status`` is None or 0 for requests that never completed; ``method`` is
    None when the interception layer could not determine it.
    """
    url: str
    method: Optional[str] = None
    status: Optional[int] = None
    request: HttpMessage = field(default_factory=HttpMessage)
    response: HttpMessage = field(default_factory=HttpMessage)
    duration_ms: Optional[float] = None     # Measured by the interception layer

    @property
    def resolved_duration_ms(self) -> Optional[float]:
        """Duration used for slow-request detection.

        Prefers the measured ``duration_ms``. Falls back to the leading
        integer of the ``x-response-time`` response header.

        Returns:
            Duration in milliseconds, or None if unknown
        """
        if self.duration_ms is not None:
            try:
                return float(self.duration_ms)
            except (TypeError, ValueError):
                return None

        if not isinstance(self.response, HttpMessage):
            return None

        raw = self.response.header(RESPONSE_TIME_HEADER)
        if not isinstance(raw, str):
            return None

        match = _LEADING_INT.match(raw.strip())
        if match is None:
            return None
        return float(match.group(0))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RequestEvent":
        """Build an event from the mapping emitted by the interception layer.

        Args:
            data: Mapping with url, method, status, request, response and
                optionally duration_ms (or duration)

        Returns:
            RequestEvent

        Raises:
            ValueError: If status or duration are not numeric
        """
        duration = data.get("duration_ms", data.get("duration"))
        status = data.get("status")
        method = data.get("method")

        return cls(
            url=str(data.get("url") or ""),
            method=str(method) if method is not None else None,
            status=int(status) if status is not None else None,
            request=HttpMessage.from_dict(data.get("request")),
            response=HttpMessage.from_dict(data.get("response")),
            duration_ms=float(duration) if duration is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "status": self.status,
            "request": self.request.to_dict(),
            "response": self.response.to_dict(),
            "duration_ms": self.duration_ms,
        }


# ============================================================================
# Verdict Models
# ============================================================================

@dataclass(frozen=True)
class Keep:
    """Forward the event, unchanged, to transport."""
    event: RequestEvent

    kept = True


@dataclass(frozen=True)
class Drop:
    """Never forward the event."""

    kept = False


Verdict = Union[Keep, Drop]


@dataclass(frozen=True)
class Decision:
    """A verdict together with the rule that produced it."""
    verdict: Verdict
    rule: Rule

    @property
    def kept(self) -> bool:
        return isinstance(self.verdict, Keep)


# ============================================================================
# Classifier Configuration
# ============================================================================

@dataclass
class SanitizerOptions:
    """Partial classifier configuration.

    Every field left as None is filled with its default by build_config.
    Pattern entries may be given in any form accepted by parse_pattern.
    """
    slow_request_threshold_ms: Optional[float] = None
    error_status_threshold: Optional[int] = None
    ignored_domains: Optional[Sequence[str]] = None
    api_patterns: Optional[Sequence[Any]] = None
    ignored_extensions: Optional[Sequence[str]] = None
    own_domains: Optional[Sequence[str]] = None
    custom_filter: Optional[Callable[[RequestEvent], bool]] = None

    def merged(self, other: "SanitizerOptions") -> "SanitizerOptions":
        """Overlay ``other`` on these options; fields set in ``other`` win."""
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(other)
            if getattr(other, f.name) is not None
        }
        return replace(self, **updates)


@dataclass(frozen=True)
class ClassifierConfig:
    """Fully resolved, immutable classifier configuration.

    Built once (see build_config) and shared by every classification in a
    recording session.
    """
    slow_request_threshold_ms: float = DEFAULTS["slow_request_threshold_ms"]
    error_status_threshold: int = DEFAULTS["error_status_threshold"]
    ignored_domains: tuple[str, ...] = DEFAULT_IGNORED_DOMAINS
    api_patterns: tuple[Pattern, ...] = field(
        default_factory=lambda: parse_patterns(DEFAULT_API_PATTERNS)
    )
    ignored_extensions: tuple[str, ...] = DEFAULT_IGNORED_EXTENSIONS
    own_domains: tuple[str, ...] = ()
    custom_filter: Optional[Callable[[RequestEvent], bool]] = field(
        default=None, compare=False
    )


def _as_tuple(values: Sequence[str]) -> tuple[str, ...]:
    if isinstance(values, str):
        return (values,)
    return tuple(str(value) for value in values)


def build_config(
    options: Optional[SanitizerOptions] = None,
    *,
    page_hostname: Optional[str] = None,
    **overrides: Any,
) -> ClassifierConfig:
    """Resolve partial options into a complete ClassifierConfig.

    Unset fields take their documented defaults. Values are not range
    checked: a negative slow-request threshold is kept as-is.

    Args:
        options: Partial configuration (defaults for everything if None)
        page_hostname: Hostname of the page being recorded; becomes the
            default own domain
        **overrides: Individual SanitizerOptions fields, applied on top of
            ``options``

    Returns:
        ClassifierConfig

    Raises:
        ConfigError: If an override names an unknown option or a pattern
            has an unsupported shape
        InvalidPatternError: If a regex pattern does not compile
    """
    if options is None:
        options = SanitizerOptions()

    if overrides:
        try:
            options = replace(options, **overrides)
        except TypeError as e:
            raise ConfigError(f"Unknown sanitizer option: {e}") from e

    defaults = ClassifierConfig()

    if options.own_domains is not None:
        own_domains = _as_tuple(options.own_domains)
    elif page_hostname:
        own_domains = (page_hostname,)
    else:
        own_domains = ()

    return ClassifierConfig(
        slow_request_threshold_ms=(
            float(options.slow_request_threshold_ms)
            if options.slow_request_threshold_ms is not None
            else defaults.slow_request_threshold_ms
        ),
        error_status_threshold=(
            int(options.error_status_threshold)
            if options.error_status_threshold is not None
            else defaults.error_status_threshold
        ),
        ignored_domains=(
            _as_tuple(options.ignored_domains)
            if options.ignored_domains is not None
            else defaults.ignored_domains
        ),
        api_patterns=(
            parse_patterns(options.api_patterns)
            if options.api_patterns is not None
            else defaults.api_patterns
        ),
        ignored_extensions=tuple(
            ext.lower()
            for ext in (
                _as_tuple(options.ignored_extensions)
                if options.ignored_extensions is not None
                else defaults.ignored_extensions
            )
        ),
        own_domains=own_domains,
        custom_filter=options.custom_filter,
    )
