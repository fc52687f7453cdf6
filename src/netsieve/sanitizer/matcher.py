"""URL and hostname matching helpers for the classification rules.

Every helper here is total: malformed URLs and empty pattern lists produce
False or an empty string, never an exception. Entries are plain substring
or suffix tests, so an empty entry matches every URL.
"""

from typing import Sequence
from urllib.parse import urlparse

from netsieve.core.models import Pattern


def matches(url: str, patterns: Sequence[Pattern]) -> bool:
    """Check if URL matches any pattern.

    Literal patterns are case-insensitive substring tests on the full URL;
    regex patterns are searched in the URL as given.

    Args:
        url: URL to check
        patterns: Literal and regex patterns

    Returns:
        True if at least one pattern matches, False otherwise
    """
    return any(pattern.matches(url) for pattern in patterns)


def get_hostname(url: str) -> str:
    """Extract the hostname of an absolute URL.

    Args:
        url: URL to parse

    Returns:
        Lower-cased hostname, or "" for relative or unparsable URLs
    """
    if not url:
        return ""
    try:
        parsed = urlparse(url)
        # Protocol-relative URLs have no base to resolve against
        if not parsed.scheme:
            return ""
        return parsed.hostname or ""
    except ValueError:
        return ""


def hostname_contains(hostname: str, domain: str) -> bool:
    """Case-sensitive substring test of ``domain`` in ``hostname``.

    An empty ``domain`` is a substring of every hostname.
    """
    return domain in hostname


def matches_domain(url: str, hostname: str, domain: str) -> bool:
    """Check a domain entry against a hostname, then the whole URL.

    The URL fallback covers entries such as ``facebook.com/tr`` that are
    path fragments rather than plain hostnames, and URLs whose hostname
    could not be extracted.
    """
    return hostname_contains(hostname, domain) or domain in url.lower()


def is_static_resource(url: str, extensions: Sequence[str]) -> bool:
    """Check if URL ends with a static file extension.

    The suffix test runs on the full lower-cased URL, so a query string
    after the file name hides the extension.

    Args:
        url: URL to check
        extensions: Suffixes such as ".js", compared case-insensitively

    Returns:
        True if URL ends with one of the extensions, False otherwise
    """
    lower_url = url.lower()
    return any(lower_url.endswith(ext.lower()) for ext in extensions)
