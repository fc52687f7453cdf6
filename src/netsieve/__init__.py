"""netsieve: keep/drop classification of captured network events."""

__version__ = "0.1.0"

from netsieve.core.models import (
    ClassifierConfig,
    Decision,
    Drop,
    HttpMessage,
    Keep,
    LiteralPattern,
    RegexPattern,
    RequestEvent,
    SanitizerOptions,
    build_config,
)
from netsieve.sanitizer import (
    CaptureScope,
    Classifier,
    build_classifier,
    build_scoped_classifier,
    classify,
    explain,
    presets,
)

__all__ = [
    "__version__",
    "ClassifierConfig",
    "Decision",
    "Drop",
    "HttpMessage",
    "Keep",
    "LiteralPattern",
    "RegexPattern",
    "RequestEvent",
    "SanitizerOptions",
    "build_config",
    "CaptureScope",
    "Classifier",
    "build_classifier",
    "build_scoped_classifier",
    "classify",
    "explain",
    "presets",
]
