"""Network event classification.

This package decides which captured network calls a session recording keeps:
- Classifier / build_classifier: The configurable rule chain
- presets: Named classifiers (strict, balanced, verbose, debug)
- build_scoped_classifier: Classifiers built from a capture/ignore scope
- matches: URL pattern matching used by the rules
"""

from netsieve.sanitizer import presets
from netsieve.sanitizer.engine import (
    Classifier,
    PassthroughClassifier,
    build_classifier,
    classify,
    explain,
)
from netsieve.sanitizer.matcher import matches
from netsieve.sanitizer.scoped import CaptureScope, build_scoped_classifier

__all__ = [
    "Classifier",
    "PassthroughClassifier",
    "build_classifier",
    "classify",
    "explain",
    "matches",
    "presets",
    "CaptureScope",
    "build_scoped_classifier",
]
