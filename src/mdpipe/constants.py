#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the mdpipe library.

This module centralizes the hardcoded values, magic numbers, and marker
tables shared by the parsers, converters, serializer, and cache.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Escape Sentinels - Placeholders protecting escaped extension markers
3. Cache and Offload Thresholds - Sizing for the parse cache and worker
4. Serialization - Marker characters and the math code-block sentinel
5. Security Constants - URL scheme policy
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

HardBreakStyle = Literal["backslash", "trailing-spaces"]
ParserKind = Literal["fast", "full"]
Alignment = Literal["left", "center", "right"]
AlertKind = Literal["NOTE", "TIP", "IMPORTANT", "WARNING", "CAUTION"]

ALERT_KINDS: tuple[str, ...] = ("NOTE", "TIP", "IMPORTANT", "WARNING", "CAUTION")

# =============================================================================
# Escape Sentinels
# =============================================================================

# Private-use-area placeholders, one per escapable marker character
HIGHLIGHT_SENTINEL = "\ue001"
UNDERLINE_SENTINEL = "\ue002"
CARET_SENTINEL = "\ue003"
TILDE_SENTINEL = "\ue004"

# Escape sequence -> replacement emitted by the preprocessor
ESCAPE_SEQUENCES: tuple[tuple[str, str], ...] = (
    ("\\==", HIGHLIGHT_SENTINEL * 2),
    ("\\++", UNDERLINE_SENTINEL * 2),
    ("\\^", CARET_SENTINEL),
    ("\\~", TILDE_SENTINEL),
)

# Sentinel -> literal character restored after parsing
SENTINEL_RESTORE: dict[str, str] = {
    HIGHLIGHT_SENTINEL: "=",
    UNDERLINE_SENTINEL: "+",
    CARET_SENTINEL: "^",
    TILDE_SENTINEL: "~",
}

# =============================================================================
# Cache and Offload Thresholds
# =============================================================================

# Documents shorter than this are never cached
MIN_CACHE_SIZE = 5000
# Maximum number of cached syntax trees
MAX_CACHE_SIZE = 20

# Inputs at or above this length are parsed in the background worker
WORKER_SIZE_THRESHOLD = 10000

# FNV-1a 32-bit parameters
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619

# Number of characters of input echoed in ParseError diagnostics
ERROR_PREVIEW_LENGTH = 200

# =============================================================================
# Serialization
# =============================================================================

DEFAULT_HARD_BREAK_STYLE: HardBreakStyle = "backslash"
DEFAULT_PRESERVE_LINE_BREAKS = False

# Code-block language used to carry block math through the document tree
MATH_BLOCK_LANGUAGE = "$$math$$"

DEFAULT_DETAILS_SUMMARY = "Details"

BULLET_MARKER = "-"
MIN_CODE_FENCE_LENGTH = 3

# =============================================================================
# Security Constants
# =============================================================================

SAFE_URL_SCHEMES = frozenset({"http", "https", "mailto", "tel", "data"})
BLOCKED_URL_FALLBACK = "about:blank"
