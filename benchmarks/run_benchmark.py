#!/usr/bin/env python3
"""
Benchmark suite for html-text-compressor.

Measures compression ratio, character savings and timing for a set of option
presets across all corpus files.

Usage:
    python benchmarks/run_benchmark.py                    # basic run
    python benchmarks/run_benchmark.py --preset aggressive  # single preset
    python benchmarks/run_benchmark.py --minify           # minify inline JS/CSS too
    python benchmarks/run_benchmark.py --output results.json  # save to file
    python benchmarks/run_benchmark.py --iterations 20    # average over 20 runs
"""

from __future__ import annotations

import argparse
import datetime
import json
import platform
import statistics
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

# Ensure the src package is importable when running from repo root.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT / "src"))

from html_text_compressor import (  # noqa: E402
    BLOCK_TAGS_MAX,
    CompressionConfig,
    CssMinifier,
    JavaScriptMinifier,
    compress,
    compress_with_stats,
)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESETS: dict[str, dict[str, object]] = {
    "default": {},
    "intertag": {"remove_intertag_spaces": True},
    "aggressive": {
        "remove_intertag_spaces": True,
        "remove_quotes": True,
        "simple_doctype": True,
        "remove_script_attributes": True,
        "remove_style_attributes": True,
        "remove_link_attributes": True,
        "remove_form_attributes": True,
        "remove_input_attributes": True,
        "simple_boolean_attributes": True,
        "remove_javascript_protocol": True,
        "remove_http_protocol": True,
        "remove_https_protocol": True,
        "remove_surrounding_spaces": BLOCK_TAGS_MAX,
    },
}


def build_config(preset: str, *, minify: bool = False) -> CompressionConfig:
    options = dict(PRESETS[preset])
    if minify:
        options.update(
            compress_javascript=True,
            compress_css=True,
            javascript_compressor=JavaScriptMinifier(),
            css_compressor=CssMinifier(),
        )
    return CompressionConfig.from_options(**options)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class PresetResult:
    """Benchmark result for a single (file, preset) combination."""

    preset: str
    original_chars: int
    compressed_chars: int
    ratio: float
    savings_pct: float
    preserved_chars: int
    mean_time_ms: float
    median_time_ms: float
    min_time_ms: float
    max_time_ms: float


@dataclass(slots=True)
class FileResult:
    """Benchmark results for a single corpus file across all presets."""

    filename: str
    original_chars: int
    presets: list[PresetResult] = field(default_factory=list)


@dataclass(slots=True)
class BenchmarkReport:
    """Full benchmark report."""

    timestamp: str
    python_version: str
    platform: str
    iterations: int
    minify: bool
    files: list[FileResult] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

_SEP = "-" * 100
_HEADER_FMT = "  {:<12s} {:>10s} {:>10s} {:>8s} {:>8s} {:>10s} {:>10s} {:>10s}"
_ROW_FMT = "  {:<12s} {:>10,d} {:>10,d} {:>7.1f}% {:>7.1f}% {:>10,d} {:>9.2f}ms {:>9.2f}ms"


def _print_table_header() -> None:
    print(_HEADER_FMT.format(
        "Preset", "Orig", "Comp", "Ratio", "Saved", "Preserved", "Mean(ms)", "Med(ms)"
    ))


def _print_table_row(r: PresetResult) -> None:
    print(_ROW_FMT.format(
        r.preset,
        r.original_chars,
        r.compressed_chars,
        r.ratio * 100,
        r.savings_pct,
        r.preserved_chars,
        r.mean_time_ms,
        r.median_time_ms,
    ))


# ---------------------------------------------------------------------------
# Core benchmark logic
# ---------------------------------------------------------------------------


def benchmark_html(
    html: str,
    presets: list[str],
    *,
    iterations: int = 10,
    minify: bool = False,
) -> list[PresetResult]:
    """Run compression with every preset and return results."""
    results: list[PresetResult] = []

    for preset in presets:
        config = build_config(preset, minify=minify)
        timings: list[float] = []

        for _ in range(iterations):
            t0 = time.perf_counter()
            compress(html, config)
            t1 = time.perf_counter()
            timings.append((t1 - t0) * 1000)  # ms

        result = compress_with_stats(html, config)

        results.append(PresetResult(
            preset=preset,
            original_chars=result.original_length,
            compressed_chars=result.compressed_length,
            ratio=result.ratio,
            savings_pct=result.savings_pct,
            preserved_chars=result.statistics.preserved_size,
            mean_time_ms=statistics.mean(timings),
            median_time_ms=statistics.median(timings),
            min_time_ms=min(timings),
            max_time_ms=max(timings),
        ))

    return results


def run_benchmark(
    corpus_dir: Path,
    presets: list[str],
    *,
    iterations: int = 10,
    minify: bool = False,
    output_path: Path | None = None,
) -> BenchmarkReport:
    """Run the full benchmark over all corpus files."""
    report = BenchmarkReport(
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        python_version=platform.python_version(),
        platform=platform.platform(),
        iterations=iterations,
        minify=minify,
    )

    corpus_files = sorted(corpus_dir.glob("*.html"))
    if not corpus_files:
        print(f"No .html files found in {corpus_dir}")
        sys.exit(1)

    print("\nhtml-text-compressor benchmark")
    print(f"Python {platform.python_version()} on {platform.platform()}")
    print(f"Iterations per preset: {iterations}")
    if minify:
        print("Inline JS/CSS minification: ON (rjsmin, rcssmin)")
    print(_SEP)

    for fp in corpus_files:
        html = fp.read_text(encoding="utf-8")

        print(f"\n  File: {fp.name} ({len(html):,d} chars)")
        _print_table_header()

        preset_results = benchmark_html(html, presets, iterations=iterations, minify=minify)
        report.files.append(FileResult(filename=fp.name, original_chars=len(html), presets=preset_results))

        for pr in preset_results:
            _print_table_row(pr)

    # Summary across all files
    print(f"\n{_SEP}")
    print("  AGGREGATE SUMMARY")
    print(_SEP)
    _print_table_header()

    for preset in presets:
        rows = [pr for fr in report.files for pr in fr.presets if pr.preset == preset]
        all_orig = sum(pr.original_chars for pr in rows)
        all_comp = sum(pr.compressed_chars for pr in rows)
        ratio = all_comp / all_orig if all_orig > 0 else 1.0

        _print_table_row(PresetResult(
            preset=preset,
            original_chars=all_orig,
            compressed_chars=all_comp,
            ratio=ratio,
            savings_pct=(1.0 - ratio) * 100.0,
            preserved_chars=sum(pr.preserved_chars for pr in rows),
            mean_time_ms=statistics.mean(pr.mean_time_ms for pr in rows),
            median_time_ms=statistics.median(pr.median_time_ms for pr in rows),
            min_time_ms=0.0,
            max_time_ms=0.0,
        ))

    print()

    # Optionally write JSON
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(asdict(report), indent=2), encoding="utf-8")
        print(f"  Results saved to {output_path}")
        print()

    return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Benchmark suite for html-text-compressor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--corpus",
        type=Path,
        default=Path(__file__).resolve().parent / "corpus",
        help="Directory with .html corpus files (default: benchmarks/corpus/)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        action="append",
        default=None,
        help="Option preset to run (repeatable; default: all presets)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=10,
        help="Number of iterations per (file, preset) to average timing (default: 10)",
    )
    parser.add_argument(
        "--minify",
        action="store_true",
        help="Also minify inline JavaScript and CSS",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Path to save JSON results (e.g. benchmarks/results.json)",
    )
    args = parser.parse_args()

    run_benchmark(
        corpus_dir=args.corpus,
        presets=args.preset or list(PRESETS),
        iterations=args.iterations,
        minify=args.minify,
        output_path=args.output,
    )


if __name__ == "__main__":
    main()
