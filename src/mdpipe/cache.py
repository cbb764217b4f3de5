#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/cache.py
"""Content-addressed cache for parsed syntax trees.

Large documents are re-parsed on every edit, so their syntax trees are kept
in a small cache keyed by a 32-bit FNV-1a hash of the source text and the
serialized pipeline options. Small documents parse faster than they hash and
bypass the cache entirely.

Entries are evicted oldest-access first once the cache is full. Access
timestamps combine ``time.monotonic_ns()`` with a counter, so two accesses
in the same clock tick still order strictly.

"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from mdpipe.ast.nodes import Document
from mdpipe.constants import FNV_OFFSET_BASIS, FNV_PRIME, MAX_CACHE_SIZE, MIN_CACHE_SIZE
from mdpipe.exceptions import ValidationError
from mdpipe.options import PipelineOptions, options_cache_key

logger = logging.getLogger(__name__)

ParseFunction = Callable[[str, Optional[PipelineOptions]], Document]


def hash_string(text: str) -> int:
    """Hash ``text`` with 32-bit FNV-1a over its UTF-16 code units.

    Parameters
    ----------
    text : str
        Text to hash

    Returns
    -------
    int
        Unsigned 32-bit hash

    Examples
    --------
        >>> hash_string("")
        2166136261
        >>> hex(hash_string("a"))
        '0xe40c292c'

    """
    value = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", errors="surrogatepass")
    for index in range(0, len(data), 2):
        value ^= data[index] | (data[index + 1] << 8)
        value = (value * FNV_PRIME) & 0xFFFFFFFF
    return value


def cache_key(text: str, options: Optional[PipelineOptions] = None) -> int:
    """Compute the cache key for ``text`` parsed with ``options``."""
    return hash_string(text + options_cache_key(options))


@dataclass
class CacheEntry:
    """A cached syntax tree.

    Parameters
    ----------
    tree : Document
        Parsed syntax tree
    last_access : tuple of (int, int)
        Monotonic timestamp and tie-break counter of the last access

    """

    tree: Document
    last_access: tuple[int, int]


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache counters."""

    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int


class ParsingCache:
    """Thread-safe bounded cache of syntax trees.

    Parameters
    ----------
    max_size : int, default 20
        Maximum number of entries
    min_size : int, default 5000
        Minimum text length, in characters, for a document to be cached

    Examples
    --------
        >>> cache = ParsingCache(max_size=2, min_size=0)
        >>> tree = cache.get_or_parse("# Hi", None, lambda text, options: Document())
        >>> len(cache)
        1

    """

    def __init__(self, max_size: int = MAX_CACHE_SIZE, min_size: int = MIN_CACHE_SIZE) -> None:
        """Initialize an empty cache."""
        if max_size < 1:
            raise ValidationError(
                f"max_size must be at least 1, got {max_size}", parameter_name="max_size", parameter_value=max_size
            )
        if min_size < 0:
            raise ValidationError(
                f"min_size must not be negative, got {min_size}", parameter_name="min_size", parameter_value=min_size
            )
        self.max_size = max_size
        self.min_size = min_size
        self._entries: dict[int, CacheEntry] = {}
        self._lock = threading.Lock()
        self._counter = itertools.count()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _timestamp(self) -> tuple[int, int]:
        return time.monotonic_ns(), next(self._counter)

    def is_cacheable(self, text: str) -> bool:
        """Check whether ``text`` is long enough to be cached."""
        return len(text) >= self.min_size

    def _evict_if_full(self) -> None:
        """Drop the least recently accessed entry when at capacity; lock must be held."""
        if len(self._entries) < self.max_size:
            return
        oldest = min(self._entries, key=lambda key: self._entries[key].last_access)
        del self._entries[oldest]
        self._evictions += 1
        logger.debug(f"Evicted cache entry {oldest:08x}")

    def _insert(self, key: int, tree: Document) -> None:
        if key not in self._entries:
            self._evict_if_full()
        self._entries[key] = CacheEntry(tree=tree, last_access=self._timestamp())

    def get_or_parse(self, text: str, options: Optional[PipelineOptions], parse_fn: ParseFunction) -> Document:
        """Return the cached tree for ``text`` or parse and cache it.

        Parameters
        ----------
        text : str
            Markdown source
        options : PipelineOptions or None
            Options the text is parsed with; part of the key
        parse_fn : callable
            ``parse_fn(text, options)`` producing the syntax tree on a miss

        Returns
        -------
        Document
            Syntax tree

        Notes
        -----
        Exceptions from ``parse_fn`` propagate and nothing is cached. The lock
        is held while parsing so concurrent misses on the same text parse once.

        """
        if not self.is_cacheable(text):
            return parse_fn(text, options)

        key = cache_key(text, options)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.last_access = self._timestamp()
                self._hits += 1
                logger.debug(f"Cache hit for {key:08x}")
                return entry.tree

            self._misses += 1
            logger.debug(f"Cache miss for {key:08x} ({len(text)} characters)")
            tree = parse_fn(text, options)
            self._insert(key, tree)
            return tree

    def lookup(self, text: str, options: Optional[PipelineOptions] = None) -> Optional[Document]:
        """Return the cached tree for ``text`` without parsing.

        A hit refreshes the entry's access time. Text below ``min_size``
        always misses without touching the counters.

        """
        if not self.is_cacheable(text):
            return None

        key = cache_key(text, options)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                logger.debug(f"Cache miss for {key:08x}")
                return None
            entry.last_access = self._timestamp()
            self._hits += 1
            logger.debug(f"Cache hit for {key:08x}")
            return entry.tree

    def store(self, text: str, options: Optional[PipelineOptions], tree: Document) -> None:
        """Insert a tree that was parsed elsewhere, such as in the worker process."""
        if not self.is_cacheable(text):
            return
        key = cache_key(text, options)
        with self._lock:
            self._insert(key, tree)

    def prewarm(self, texts: Iterable[str], options: Optional[PipelineOptions], parse_fn: ParseFunction) -> int:
        """Parse and cache several documents ahead of use.

        Parameters
        ----------
        texts : iterable of str
            Markdown sources
        options : PipelineOptions or None
            Options the texts will be parsed with
        parse_fn : callable
            Parse function used on misses

        Returns
        -------
        int
            Number of texts that were cacheable

        """
        count = 0
        for text in texts:
            if self.is_cacheable(text):
                self.get_or_parse(text, options, parse_fn)
                count += 1
        return count

    def clear(self) -> None:
        """Drop all entries; counters are kept."""
        with self._lock:
            self._entries.clear()
            logger.debug("Cleared parsing cache")

    def stats(self) -> CacheStats:
        """Return a snapshot of the cache counters."""
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                max_size=self.max_size,
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
            )
