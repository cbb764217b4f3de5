#  Copyright (c) 2025 Tom Villani, Ph.D.
"""URL safety checks for links and images.

Links and images are the only places where markdown carries URLs into the
editor, so their schemes are checked when converting to the document tree.
The policy is an allowlist: relative references and a fixed set of schemes
pass, everything else (``javascript:``, ``vbscript:``, ``file:`` and any
unknown scheme) is rejected.

Functions
---------
- is_safe_url: Check a URL against the scheme allowlist
- sanitize_url: Return the URL if safe, otherwise None
- sanitize_url_with_fallback: Return the URL if safe, otherwise a fallback
"""

import logging
import re
from typing import Optional

from mdpipe.constants import BLOCKED_URL_FALLBACK, SAFE_URL_SCHEMES

logger = logging.getLogger(__name__)

# ASCII control characters and whitespace that browsers strip from schemes
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")
_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):")


def get_url_scheme(url: str) -> Optional[str]:
    """Extract the lower-cased scheme of ``url``.

    Parameters
    ----------
    url : str
        URL to inspect

    Returns
    -------
    str or None
        Scheme without the colon, or None for relative references

    Examples
    --------
    >>> get_url_scheme("  JavaScript:alert(1)")
    'javascript'
    >>> get_url_scheme("path/with:colon") is None
    True

    """
    compact = _CONTROL_CHARS_RE.sub("", url).lower()
    match = _SCHEME_RE.match(compact)
    return match.group(1) if match else None


def is_safe_url(url: Optional[str]) -> bool:
    """Check whether a link or image URL is safe to keep.

    Parameters
    ----------
    url : str or None
        URL to check

    Returns
    -------
    bool
        True for empty URLs, relative references and allowed schemes

    Examples
    --------
    >>> is_safe_url("https://example.com")
    True
    >>> is_safe_url("#anchor")
    True
    >>> is_safe_url("javascript:alert(1)")
    False
    >>> is_safe_url("file:///etc/passwd")
    False

    """
    if url is None or not url.strip():
        return True

    scheme = get_url_scheme(url)
    if scheme is None:
        return True
    return scheme in SAFE_URL_SCHEMES


def sanitize_url(url: Optional[str]) -> Optional[str]:
    """Return ``url`` if it is safe, otherwise None."""
    if url is None or not is_safe_url(url):
        return None
    return url


def sanitize_url_with_fallback(url: Optional[str], fallback: str = BLOCKED_URL_FALLBACK) -> str:
    """Return ``url`` if it is safe, otherwise ``fallback``.

    Parameters
    ----------
    url : str or None
        URL to sanitize
    fallback : str, default "about:blank"
        Replacement for unsafe or missing URLs

    Returns
    -------
    str
        The URL or the fallback

    """
    sanitized = sanitize_url(url)
    if sanitized is None:
        if url is not None:
            logger.warning("Blocked unsafe URL scheme: %r", url[:100])
        return fallback
    return sanitized
