"""HTML Text Compressor - Minify HTML markup while keeping scripts, styles and preformatted text intact."""

from html_text_compressor.compressor import (
    CompressionResult,
    HtmlCompressor,
    compress,
    compress_file,
    compress_with_stats,
)
from html_text_compressor.config import (
    ALL_TAGS,
    BLOCK_TAGS_MAX,
    BLOCK_TAGS_MIN,
    DEFAULT_CONFIG,
    PHP_TAG_PATTERN,
    SERVER_SCRIPT_TAG_PATTERN,
    SERVER_SIDE_INCLUDE_PATTERN,
    CompressionConfig,
)
from html_text_compressor.minifiers import Compressor, CssMinifier, JavaScriptMinifier
from html_text_compressor.stats import CompressionStatistics, HtmlMetrics

__all__ = [
    "compress",
    "compress_with_stats",
    "compress_file",
    "HtmlCompressor",
    "CompressionResult",
    "CompressionConfig",
    "DEFAULT_CONFIG",
    "CompressionStatistics",
    "HtmlMetrics",
    "Compressor",
    "JavaScriptMinifier",
    "CssMinifier",
    "BLOCK_TAGS_MIN",
    "BLOCK_TAGS_MAX",
    "ALL_TAGS",
    "PHP_TAG_PATTERN",
    "SERVER_SCRIPT_TAG_PATTERN",
    "SERVER_SIDE_INCLUDE_PATTERN",
]
