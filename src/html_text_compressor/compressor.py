"""Core compression pipeline."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from html_text_compressor.blocks import process_blocks
from html_text_compressor.compactor import compact
from html_text_compressor.config import DEFAULT_CONFIG, CompressionConfig
from html_text_compressor.extractor import extract
from html_text_compressor.restorer import restore
from html_text_compressor.stats import CompressionStatistics, finish_statistics, start_statistics

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class CompressionResult:
    """Result of compression with detailed statistics."""

    text: str                              # the compressed markup
    original_length: int                   # len(original input)
    compressed_length: int                 # len(text)
    ratio: float                           # compressed_length / original_length (0.0-1.0)
    savings_pct: float                     # (1 - ratio) * 100
    statistics: CompressionStatistics      # sizes, timing, preserved bytes

    def __str__(self) -> str:
        return self.text


def _resolve_config(config: CompressionConfig | None, options: dict[str, Any]) -> CompressionConfig:
    base = config if config is not None else DEFAULT_CONFIG
    return base.with_options(**options) if options else base


def _run(html: str, config: CompressionConfig, stats: CompressionStatistics | None) -> str:
    """Extract, compact, post-process and restore *html*."""
    nested_config = config.copy()

    def _compress_nested(content: str) -> str:
        # conditional comment bodies: fresh buckets, fresh counters, no stats
        return _run(content, nested_config, None) if content else content

    extraction = extract(html, config, nested=_compress_nested)
    compacted = compact(extraction.text, config)
    blocks = process_blocks(extraction.blocks, config, stats)
    return restore(compacted, blocks, extraction.rules)


def compress(html: str, config: CompressionConfig | None = None, **options: Any) -> str:
    """Minify HTML while leaving scripts, styles, ``<pre>`` and friends intact.

    Regions that must not be touched (``<pre>``, ``<textarea>``, ``<script>``,
    ``<style>``, event handlers, conditional comments, ``<!-- {{{ -->`` skip
    blocks and custom ``preserve_patterns``) are swapped for placeholder
    tokens, the remaining markup is compacted, and the regions are put back,
    minified by the configured sub-compressors where enabled.

    Args:
        html: Markup to compress.
        config: Options for this run; defaults to :data:`DEFAULT_CONFIG`.
        **options: Individual options overriding *config*
            (e.g. ``remove_intertag_spaces=True``).

    Returns:
        Compressed markup. Empty input, or any input when the config is
        disabled, is returned unchanged.

    Raises:
        ValueError: If an option name is unknown or a preserve pattern string
            is not a valid regex.
    """
    config = _resolve_config(config, options)
    if not config.enabled or not html:
        return html
    return _run(html, config, None)


def compress_with_stats(html: str, config: CompressionConfig | None = None, **options: Any) -> CompressionResult:
    """Compress HTML and return detailed compression statistics.

    Args:
        html: Markup to compress.
        config: Options for this run; defaults to :data:`DEFAULT_CONFIG`.
        **options: Individual options overriding *config*.

    Returns:
        CompressionResult with compressed markup, ratios and statistics.
    """
    config = _resolve_config(config, options)
    stats = start_statistics(html or "")

    if not config.enabled or not html:
        text = html
    else:
        text = _run(html, config, stats)
    finish_statistics(stats, text or "")

    original_length = len(html or "")
    compressed_length = len(text or "")
    ratio = compressed_length / original_length if original_length > 0 else 1.0

    logger.debug("compressed %d -> %d chars in %.3fms", original_length, compressed_length, stats.time)
    return CompressionResult(
        text=text,
        original_length=original_length,
        compressed_length=compressed_length,
        ratio=ratio,
        savings_pct=(1 - ratio) * 100,
        statistics=stats,
    )


def compress_file(
    file_path: str,
    config: CompressionConfig | None = None,
    encoding: str = "utf-8",
    **options: Any,
) -> str:
    """Compress an HTML file and return the result.

    The whole file is read at once: preserved regions may span any number of
    lines, so markup cannot be compressed chunk by chunk.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    with open(file_path, encoding=encoding) as f:
        html = f.read()
    return compress(html, config, **options)


class HtmlCompressor:
    """A configured compressor that can keep statistics of its last run.

    With ``generate_statistics`` enabled the instance holds mutable state
    (:attr:`statistics`) and must not be shared between threads; use one
    instance per concurrent caller, or the module-level :func:`compress`.
    """

    def __init__(
        self,
        config: CompressionConfig | None = None,
        generate_statistics: bool = False,
        **options: Any,
    ) -> None:
        self.config = _resolve_config(config, options)
        self.generate_statistics = generate_statistics
        self.statistics: CompressionStatistics | None = None

    def compress(self, html: str) -> str:
        if not self.generate_statistics:
            self.statistics = None
            return compress(html, self.config)
        result = compress_with_stats(html, self.config)
        self.statistics = result.statistics
        return result.text
