"""Scoped classifiers built from a "capture only / ignore" intent.

This module translates a simplified scope description into classifier
configuration:

- capture_only.domains  -> own_domains
- capture_only.patterns -> api_patterns
- ignore.domains        -> ignored_domains
- ignore.patterns       -> custom_filter rejecting matching URLs

A custom filter returning False does not force a drop by itself: the
event is dropped only when no earlier rule kept it.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from netsieve.core.exceptions import ConfigError
from netsieve.core.models import (
    ClassifierConfig,
    RequestEvent,
    SanitizerOptions,
    build_config,
    parse_patterns,
)
from netsieve.sanitizer.engine import Classifier
from netsieve.sanitizer.matcher import matches


@dataclass
class CaptureScope:
    """Domains and URL patterns making up one side of a scope."""
    domains: Optional[Sequence[str]] = None
    patterns: Optional[Sequence[Any]] = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "CaptureScope":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Scope section must be a mapping, got {type(data).__name__}")

        unknown = set(data) - {"domains", "patterns"}
        if unknown:
            raise ConfigError(f"Unknown scope keys: {', '.join(sorted(unknown))}")

        return cls(domains=data.get("domains"), patterns=data.get("patterns"))


ScopeLike = Union[CaptureScope, dict[str, Any], None]


def _as_scope(scope: ScopeLike) -> CaptureScope:
    if isinstance(scope, CaptureScope):
        return scope
    return CaptureScope.from_dict(scope)


class IgnoredPatternFilter:
    """Custom filter passing every event whose URL matches no ignored pattern."""

    def __init__(self, patterns: Sequence[Any]):
        self.patterns = parse_patterns(patterns)

    def __call__(self, event: RequestEvent) -> bool:
        return not matches(event.url or "", self.patterns)


def build_scoped_config(
    capture_only: ScopeLike = None,
    ignore: ScopeLike = None,
    *,
    page_hostname: Optional[str] = None,
) -> ClassifierConfig:
    """Translate a capture/ignore scope into a ClassifierConfig.

    Parts of the scope left unset fall back to the classifier defaults.

    Args:
        capture_only: Domains to treat as own and patterns to treat as API
        ignore: Domains to ignore and URL patterns the custom filter rejects
        page_hostname: Hostname of the recorded page, the default own domain

    Returns:
        ClassifierConfig

    Raises:
        ConfigError: If a scope is malformed or a pattern is invalid
    """
    capture_scope = _as_scope(capture_only)
    ignore_scope = _as_scope(ignore)

    options = SanitizerOptions(
        own_domains=capture_scope.domains,
        api_patterns=capture_scope.patterns,
        ignored_domains=ignore_scope.domains,
        custom_filter=(
            IgnoredPatternFilter(ignore_scope.patterns)
            if ignore_scope.patterns is not None
            else None
        ),
    )
    return build_config(options, page_hostname=page_hostname)


def build_scoped_classifier(
    capture_only: ScopeLike = None,
    ignore: ScopeLike = None,
    *,
    page_hostname: Optional[str] = None,
    name: str = "scoped",
) -> Classifier:
    """Build a classifier from a capture/ignore scope. See build_scoped_config.

    Example:
        >>> classifier = build_scoped_classifier(
        ...     capture_only={"domains": ["api.myapp.com"], "patterns": ["/graphql"]},
        ...     ignore={"patterns": ["/health", "/metrics"]},
        ... )
    """
    config = build_scoped_config(capture_only, ignore, page_hostname=page_hostname)
    return Classifier(config, name=name)
