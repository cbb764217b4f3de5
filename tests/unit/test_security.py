#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for URL safety checks."""

import logging

import pytest

from mdpipe.utils.security import get_url_scheme, is_safe_url, sanitize_url, sanitize_url_with_fallback


@pytest.mark.unit
class TestUrlSafety:
    """Test the URL scheme allowlist."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com",
            "http://example.com/a?b=c",
            "mailto:someone@example.com",
            "tel:+15550100",
            "#anchor",
            "relative/path.md",
            "/absolute/path",
            "path/with:colon",
            "",
            None,
        ],
    )
    def test_safe_urls(self, url) -> None:
        """Test URLs that are kept."""
        assert is_safe_url(url)

    @pytest.mark.parametrize(
        "url",
        [
            "javascript:alert(1)",
            "JavaScript:alert(1)",
            "  javascript:alert(1)",
            "java\tscript:alert(1)",
            "vbscript:msgbox",
            "file:///etc/passwd",
            "unknown-scheme:thing",
        ],
    )
    def test_unsafe_urls(self, url: str) -> None:
        """Test URLs that are rejected, including obfuscated schemes."""
        assert not is_safe_url(url)

    def test_get_url_scheme(self) -> None:
        """Test scheme extraction."""
        assert get_url_scheme("HTTPS://example.com") == "https"
        assert get_url_scheme("page.md") is None

    def test_sanitize_url(self) -> None:
        """Test returning safe URLs and None for unsafe ones."""
        assert sanitize_url("https://example.com") == "https://example.com"
        assert sanitize_url("javascript:alert(1)") is None
        assert sanitize_url(None) is None

    def test_sanitize_with_fallback(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test the fallback replacement and its warning."""
        with caplog.at_level(logging.WARNING):
            assert sanitize_url_with_fallback("javascript:alert(1)") == "about:blank"
        assert "Blocked unsafe URL" in caplog.text
        assert sanitize_url_with_fallback("vbscript:x", fallback="#") == "#"
        assert sanitize_url_with_fallback("https://example.com") == "https://example.com"
