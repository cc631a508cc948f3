"""Post-processing of extracted blocks before they are put back."""

from __future__ import annotations

import logging
import re

from html_text_compressor.config import CompressionConfig
from html_text_compressor.extractor import PreservedBlocks
from html_text_compressor.minifiers import Compressor
from html_text_compressor.rules import EVENT, SCRIPT, STYLE
from html_text_compressor.stats import CompressionStatistics

logger = logging.getLogger(__name__)

_CDATA_RE = re.compile(r"\s*<!\[CDATA\[(.*?)\]\]>\s*", re.DOTALL | re.IGNORECASE)
_SCRIPT_CDATA_RE = re.compile(
    r"\s*/\*\s*<!\[CDATA\[\*/(.*?)/\*\]\]>\s*\*/\s*", re.DOTALL | re.IGNORECASE
)
_EVENT_JS_PROTOCOL_RE = re.compile(r"^javascript:\s*(.+)", re.DOTALL | re.IGNORECASE)


def compress_javascript(source: str, compressor: Compressor | None) -> str:
    """Minify a script body, keeping a CDATA wrapper if it had one."""
    if compressor is None:
        logger.debug("no JavaScript compressor configured, script left as is")
        return source

    m = _SCRIPT_CDATA_RE.fullmatch(source)
    if m:
        return f"/*<![CDATA[*/{compressor.compress(m.group(1))}/*]]>*/"
    m = _CDATA_RE.fullmatch(source)
    if m:
        return f"<![CDATA[{compressor.compress(m.group(1))}]]>"
    return compressor.compress(source)


def compress_css(source: str, compressor: Compressor | None) -> str:
    """Minify a style body, keeping a CDATA wrapper if it had one."""
    if compressor is None:
        logger.debug("no CSS compressor configured, style left as is")
        return source

    m = _CDATA_RE.fullmatch(source)
    if m:
        return f"<![CDATA[{compressor.compress(m.group(1))}]]>"
    return compressor.compress(source)


def remove_javascript_protocol(source: str) -> str:
    """``javascript:alert()`` -> ``alert()`` (first occurrence only)."""
    return _EVENT_JS_PROTOCOL_RE.sub(r"\1", source, count=1)


def _process_script_blocks(
    blocks: list[str], config: CompressionConfig, stats: CompressionStatistics | None
) -> None:
    if stats is not None:
        stats.original_metrics.inline_script_size += sum(len(b) for b in blocks)

    if config.compress_javascript:
        blocks[:] = [compress_javascript(b, config.javascript_compressor) for b in blocks]
    elif stats is not None:
        stats.preserved_size += sum(len(b) for b in blocks)

    if stats is not None:
        stats.compressed_metrics.inline_script_size += sum(len(b) for b in blocks)


def _process_style_blocks(
    blocks: list[str], config: CompressionConfig, stats: CompressionStatistics | None
) -> None:
    if stats is not None:
        stats.original_metrics.inline_style_size += sum(len(b) for b in blocks)

    if config.compress_css:
        blocks[:] = [compress_css(b, config.css_compressor) for b in blocks]
    elif stats is not None:
        stats.preserved_size += sum(len(b) for b in blocks)

    if stats is not None:
        stats.compressed_metrics.inline_style_size += sum(len(b) for b in blocks)


def _process_event_blocks(
    blocks: list[str], config: CompressionConfig, stats: CompressionStatistics | None
) -> None:
    if stats is not None:
        stats.original_metrics.inline_event_size += sum(len(b) for b in blocks)

    if config.remove_javascript_protocol:
        blocks[:] = [remove_javascript_protocol(b) for b in blocks]

    # handlers are never minified, so they count as preserved either way
    if stats is not None:
        stats.preserved_size += sum(len(b) for b in blocks)
        stats.compressed_metrics.inline_event_size += sum(len(b) for b in blocks)


def process_blocks(
    blocks: PreservedBlocks,
    config: CompressionConfig,
    stats: CompressionStatistics | None = None,
) -> PreservedBlocks:
    """Transform extracted blocks in place.

    Scripts and styles go through the configured sub-compressors, event
    handlers lose their ``javascript:`` prefix. Every other bucket is passed
    through and only counted in ``stats.preserved_size``.
    """
    for category, bucket in blocks:
        if category == SCRIPT:
            _process_script_blocks(bucket, config, stats)
        elif category == STYLE:
            _process_style_blocks(bucket, config, stats)
        elif category == EVENT:
            _process_event_blocks(bucket, config, stats)
        elif stats is not None:
            stats.preserved_size += sum(len(b) for b in bucket)
    return blocks
