"""Constants used throughout netsieve.

This module contains enums, default lists, and static configurations
to ensure consistency across the classifier, presets, and CLI.
"""

from enum import Enum


class Rule(str, Enum):
    """Rules of the classification chain, in evaluation order."""
    FAILURE = "failure"
    SLOW_REQUEST = "slow_request"
    STATIC_RESOURCE = "static_resource"
    THIRD_PARTY = "third_party"
    API_PATTERN = "api_pattern"
    MUTATION_METHOD = "mutation_method"
    OWN_DOMAIN = "own_domain"
    CUSTOM_FILTER = "custom_filter"
    DEFAULT = "default"
    PASSTHROUGH = "passthrough"             # debug preset, bypasses the chain


class PresetName(str, Enum):
    """Named classifier presets."""
    STRICT = "strict"
    BALANCED = "balanced"
    VERBOSE = "verbose"
    DEBUG = "debug"


class AuditEventType(str, Enum):
    """Types of events recorded in the decision audit log."""
    SESSION_START = "session_start"
    SESSION_FINISH = "session_finish"
    DECISION = "decision"


# Third-party tracking, analytics, and session replay hosts
DEFAULT_IGNORED_DOMAINS = (
    # Analytics & tracking
    "google-analytics.com",
    "googletagmanager.com",
    "analytics.google.com",
    "doubleclick.net",
    "googlesyndication.com",
    # Social media pixels (path fragments match against the full URL)
    "facebook.com/tr",
    "facebook.net",
    "connect.facebook.net",
    "twitter.com/i/jot",
    "linkedin.com/px",
    "pinterest.com/ct",
    # Customer data platforms
    "segment.com",
    "segment.io",
    "mparticle.com",
    # Session replay
    "hotjar.com",
    "mouseflow.com",
    "smartlook.com",
    "fullstory.com",
    "logrocket.com",
)


# Static resources, already covered by the browser's resource timing data
DEFAULT_IGNORED_EXTENSIONS = (
    # Scripts
    ".js", ".mjs", ".cjs",
    # Styles
    ".css", ".scss", ".sass", ".less",
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".ico", ".bmp",
    # Fonts
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    # Media
    ".mp4", ".webm", ".ogg", ".mp3", ".wav",
    # Documents & archives
    ".pdf", ".zip", ".tar", ".gz",
)


DEFAULT_API_PATTERNS = (
    "/api/",
    "/graphql",
    "/v1/",
    "/v2/",
    "/v3/",
    "/rest/",
    "/rpc/",
)


# Verbs that never change server state
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


# Response header carrying server-reported duration, used when the
# interception layer supplies no measured duration
RESPONSE_TIME_HEADER = "x-response-time"


# Application-wide defaults
DEFAULTS = {
    "slow_request_threshold_ms": 2000,
    "error_status_threshold": 400,
}


PRESET_DESCRIPTIONS = {
    PresetName.STRICT: "Only failures and requests slower than 5s",
    PresetName.BALANCED: "Failures, slow requests, API calls and first-party traffic",
    PresetName.VERBOSE: "Like balanced with a 1s threshold, keeps third-party traffic",
    PresetName.DEBUG: "Keeps every request",
}


# Rules whose verdict is Drop; every other rule keeps the event
DROP_RULES = frozenset({Rule.STATIC_RESOURCE, Rule.THIRD_PARTY, Rule.DEFAULT})
