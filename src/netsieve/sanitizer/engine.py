"""Rule engine deciding which captured network events to keep.

The engine evaluates a fixed, short-circuiting chain of rules against one
RequestEvent and a ClassifierConfig. The first terminal rule decides:

1. Failure override: status >= error threshold, keep
2. Slow-request override: duration > slow threshold, keep
3. Static-resource ignore: URL ends with an ignored extension, drop
4. Third-party ignore: hostname or URL contains an ignored domain, drop
5. API-pattern capture: URL matches an API pattern, keep
6. Mutation-method capture: method is not GET/HEAD/OPTIONS, keep
7. Own-domain capture: hostname contains an own domain, keep
8. Custom-filter capture: custom filter returns True, keep
9. Default: drop

Classification holds no state between calls, so a single Classifier can be
shared across threads.
"""

import logging
from typing import Any, Optional

from netsieve.core.constants import SAFE_METHODS, Rule
from netsieve.core.models import (
    ClassifierConfig,
    Decision,
    Drop,
    Keep,
    RequestEvent,
    SanitizerOptions,
    Verdict,
    build_config,
)
from netsieve.sanitizer.matcher import (
    get_hostname,
    hostname_contains,
    is_static_resource,
    matches,
    matches_domain,
)


logger = logging.getLogger(__name__)


def explain(event: RequestEvent, config: ClassifierConfig) -> Decision:
    """Classify an event and report which rule decided.

    Args:
        event: Captured network call
        config: Resolved classifier configuration

    Returns:
        Decision with the verdict and the deciding rule

    Raises:
        Exception: Whatever ``config.custom_filter`` raises, unchanged
    """
    url = event.url if isinstance(event.url, str) else ""
    hostname = get_hostname(url)

    # Failures always survive, whatever the later rules say
    status = event.status if isinstance(event.status, (int, float)) else None
    if status is not None and status >= config.error_status_threshold:
        return Decision(Keep(event), Rule.FAILURE)

    # A negative threshold disables the rule
    duration = event.resolved_duration_ms
    if (
        duration is not None
        and duration > 0
        and config.slow_request_threshold_ms >= 0
        and duration > config.slow_request_threshold_ms
    ):
        return Decision(Keep(event), Rule.SLOW_REQUEST)

    if is_static_resource(url, config.ignored_extensions):
        return Decision(Drop(), Rule.STATIC_RESOURCE)

    if any(matches_domain(url, hostname, domain) for domain in config.ignored_domains):
        return Decision(Drop(), Rule.THIRD_PARTY)

    if matches(url, config.api_patterns):
        return Decision(Keep(event), Rule.API_PATTERN)

    method = event.method if isinstance(event.method, str) else ""
    if method and method.upper() not in SAFE_METHODS:
        return Decision(Keep(event), Rule.MUTATION_METHOD)

    if any(hostname_contains(hostname, domain) for domain in config.own_domains):
        return Decision(Keep(event), Rule.OWN_DOMAIN)

    if config.custom_filter is not None and config.custom_filter(event):
        return Decision(Keep(event), Rule.CUSTOM_FILTER)

    return Decision(Drop(), Rule.DEFAULT)


def classify(event: RequestEvent, config: ClassifierConfig) -> Verdict:
    """Classify an event as Keep or Drop. See explain."""
    return explain(event, config).verdict


class Classifier:
    """Configured classifier, callable once per captured network call.

    Example:
        >>> classifier = build_classifier(slow_request_threshold_ms=3000)
        >>> verdict = classifier(event)
        >>> if verdict.kept:
        ...     transport.send(verdict.event)
    """

    def __init__(self, config: Optional[ClassifierConfig] = None, *, name: str = "custom"):
        """Initialize Classifier.

        Args:
            config: Resolved configuration (all defaults if None)
            name: Label used in logs and CLI output
        """
        self.config = config or ClassifierConfig()
        self.name = name

    def __call__(self, event: RequestEvent) -> Verdict:
        return self.explain(event).verdict

    def explain(self, event: RequestEvent) -> Decision:
        decision = explain(event, self.config)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"[{self.name}] {'keep' if decision.kept else 'drop'} "
                f"({decision.rule.value}): {event.method} {event.url} {event.status}"
            )
        return decision

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class PassthroughClassifier(Classifier):
    """Classifier that keeps every event without evaluating any rule."""

    def __init__(self, *, name: str = "passthrough"):
        super().__init__(name=name)

    def explain(self, event: RequestEvent) -> Decision:
        return Decision(Keep(event), Rule.PASSTHROUGH)


def build_classifier(
    options: Optional[SanitizerOptions] = None,
    *,
    page_hostname: Optional[str] = None,
    name: str = "custom",
    **overrides: Any,
) -> Classifier:
    """Build a classifier from partial options.

    Args:
        options: Partial configuration (defaults for everything if None)
        page_hostname: Hostname of the recorded page, the default own domain
        name: Label used in logs and CLI output
        **overrides: Individual SanitizerOptions fields

    Returns:
        Classifier

    Raises:
        ConfigError: If an option is unknown or a pattern is malformed
    """
    config = build_config(options, page_hostname=page_hostname, **overrides)
    return Classifier(config, name=name)
