"""Token estimates for the status line and the finished document.

Uses ``tiktoken`` encodings. ``get_encoding`` may need to fetch BPE ranks on
first use, so any runtime failure switches the estimator to the rough
~4-bytes-per-token approximation for the rest of the session.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Iterable
from pathlib import Path

import tiktoken

from .errors import CtxSelectError
from .logging import get_logger, log_event

DEFAULT_TOKEN_ENCODING = "cl100k_base"
APPROX_SOURCE = "approx"
BYTES_PER_TOKEN = 4

logger = get_logger(__name__)


def approx_token_count(text: str) -> int:
    """Roughly one token per ``BYTES_PER_TOKEN`` bytes of UTF-8."""
    size = len(text.encode("utf-8"))
    return math.ceil(size / BYTES_PER_TOKEN) if size else 0


class TokenEstimator:
    """Counts tokens with a tiktoken encoding and caches per-file counts."""

    def __init__(self, encoding: str = DEFAULT_TOKEN_ENCODING) -> None:
        self.encoding_name = encoding
        self._encoder = None
        self._disabled = False
        self._cache: dict[Path, tuple[tuple[int, int], int]] = {}

    @property
    def source(self) -> str:
        """Encoding name in use, or ``"approx"`` once tiktoken is unavailable."""
        self._load_encoder()
        return APPROX_SOURCE if self._disabled else self.encoding_name

    def _disable(self, error: Exception) -> None:
        self._disabled = True
        self._encoder = None
        log_event(
            logger,
            "tokens.fallback",
            level=logging.WARNING,
            encoding=self.encoding_name,
            error=str(error),
        )

    def _load_encoder(self):
        """Fetch the encoding once; a failure disables it for good."""
        if self._disabled:
            return None
        if self._encoder is None:
            try:
                self._encoder = tiktoken.get_encoding(self.encoding_name)
            except Exception as exc:
                self._disable(exc)
                return None
        return self._encoder

    def count(self, text: str) -> int:
        """Tokens in ``text``, approximated when no encoder is available."""
        encoder = self._load_encoder()
        if encoder is None:
            return approx_token_count(text)
        try:
            return len(encoder.encode(text, disallowed_special=()))
        except Exception as exc:
            self._disable(exc)
            return approx_token_count(text)

    def count_file(self, path: Path, read_bytes) -> int:
        """Token count for ``path``; unreadable files count as zero.

        Results are cached under ``(mtime_ns, size)`` so unchanged files are
        not re-read on every redraw.
        """
        try:
            stat = os.stat(path)
        except OSError:
            self._cache.pop(path, None)
            return 0
        key = (stat.st_mtime_ns, stat.st_size)
        cached = self._cache.get(path)
        if cached is not None and cached[0] == key:
            return cached[1]
        try:
            raw = read_bytes(path)
        except (CtxSelectError, OSError):
            return 0
        tokens = self.count(raw.decode("utf-8", errors="replace"))
        self._cache[path] = (key, tokens)
        return tokens

    def estimate_selection(self, paths: Iterable[Path], read_bytes) -> int:
        """Total tokens across ``paths``."""
        return sum(self.count_file(path, read_bytes) for path in paths)

    def clear_cache(self) -> None:
        """Forget cached per-file counts, e.g. after a tree reload."""
        self._cache.clear()


def format_token_count(count: int, source: str) -> str:
    """Status-line text; approximate counts are prefixed with ``~``."""
    if source == APPROX_SOURCE:
        return f"~{count:,} tokens"
    return f"{count:,} tokens"
