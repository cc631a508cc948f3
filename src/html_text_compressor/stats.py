"""Size and timing statistics for a compression run."""

from __future__ import annotations

import dataclasses
import re
import time

_EMPTY_CHAR_RE = re.compile(r"\s")


@dataclasses.dataclass(slots=True)
class HtmlMetrics:
    """Size metrics of one version of a document (all sizes in characters)."""

    filesize: int = 0              # total document length
    empty_chars: int = 0           # spaces, tabs, line ends
    inline_script_size: int = 0    # content of <script> blocks
    inline_style_size: int = 0     # content of <style> blocks
    inline_event_size: int = 0     # values of on* handlers

    def __str__(self) -> str:
        return (
            f"Filesize={self.filesize}, Empty Chars={self.empty_chars}, "
            f"Script Size={self.inline_script_size}, Style Size={self.inline_style_size}, "
            f"Event Handler Size={self.inline_event_size}"
        )


@dataclasses.dataclass(slots=True)
class CompressionStatistics:
    """Metrics before and after compression.

    ``time`` is the elapsed compression time in milliseconds and
    ``preserved_size`` the total size of blocks that were passed through
    untouched (``<pre>`` content, scripts without JS compression, etc).
    """

    original_metrics: HtmlMetrics = dataclasses.field(default_factory=HtmlMetrics)
    compressed_metrics: HtmlMetrics = dataclasses.field(default_factory=HtmlMetrics)
    time: float = 0.0
    preserved_size: int = 0
    _started: float = dataclasses.field(default=0.0, repr=False, compare=False)

    def __str__(self) -> str:
        return (
            f"Time={self.time:.3f}ms, Preserved={self.preserved_size}, "
            f"Original={self.original_metrics}, Compressed={self.compressed_metrics}"
        )


def count_empty_chars(html: str) -> int:
    return len(_EMPTY_CHAR_RE.findall(html))


def start_statistics(html: str) -> CompressionStatistics:
    """Snapshot the uncompressed document and start the clock."""
    stats = CompressionStatistics()
    stats.original_metrics.filesize = len(html)
    stats.original_metrics.empty_chars = count_empty_chars(html)
    stats._started = time.perf_counter()
    return stats


def finish_statistics(stats: CompressionStatistics, html: str) -> CompressionStatistics:
    """Record the compressed document and the elapsed time."""
    stats.time = (time.perf_counter() - stats._started) * 1000
    stats.compressed_metrics.filesize = len(html)
    stats.compressed_metrics.empty_chars = count_empty_chars(html)
    return stats
