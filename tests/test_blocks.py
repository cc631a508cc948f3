"""Tests for post-processing of extracted blocks."""

import pytest

from html_text_compressor import DEFAULT_CONFIG, CompressionConfig
from html_text_compressor.blocks import (
    compress_css,
    compress_javascript,
    process_blocks,
    remove_javascript_protocol,
)
from html_text_compressor.extractor import PreservedBlocks
from html_text_compressor.rules import EVENT, PRE, SCRIPT, STYLE
from html_text_compressor.stats import CompressionStatistics


class UpperCompressor:
    def compress(self, text: str) -> str:
        return text.strip().upper()


class FailingCompressor:
    def compress(self, text: str) -> str:
        raise RuntimeError("minifier crashed")


class TestCompressJavascript:
    def test_plain(self):
        assert compress_javascript("  var a = 1;  ", UpperCompressor()) == "VAR A = 1;"

    def test_no_compressor(self):
        assert compress_javascript("  var a = 1;  ", None) == "  var a = 1;  "

    def test_script_cdata_wrapper(self):
        source = "\n/*<![CDATA[*/\nvar a = 1;\n/*]]>*/\n"
        assert compress_javascript(source, UpperCompressor()) == "/*<![CDATA[*/VAR A = 1;/*]]>*/"

    def test_bare_cdata_wrapper(self):
        source = "<![CDATA[ var a = 1; ]]>"
        assert compress_javascript(source, UpperCompressor()) == "<![CDATA[VAR A = 1;]]>"

    def test_compressor_errors_propagate(self):
        with pytest.raises(RuntimeError, match="minifier crashed"):
            compress_javascript("var a;", FailingCompressor())


class TestCompressCss:
    def test_plain(self):
        assert compress_css(" p { color: red } ", UpperCompressor()) == "P { COLOR: RED }"

    def test_cdata_wrapper(self):
        assert compress_css("\n<![CDATA[ p{} ]]>\n", UpperCompressor()) == "<![CDATA[P{}]]>"

    def test_no_compressor(self):
        assert compress_css(" p{} ", None) == " p{} "


class TestJavascriptProtocol:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("javascript:go()", "go()"),
            ("JavaScript:  go()", "go()"),
            ("go()", "go()"),
            ("javascript:a(); javascript:b()", "a(); javascript:b()"),
            ("return javascript:go()", "return javascript:go()"),
        ],
    )
    def test_remove(self, source, expected):
        assert remove_javascript_protocol(source) == expected


class TestProcessBlocks:
    def _blocks(self) -> PreservedBlocks:
        blocks = PreservedBlocks()
        blocks.add(SCRIPT, " var a = 1; ")
        blocks.add(STYLE, " p{} ")
        blocks.add(EVENT, "javascript:go()")
        blocks.add(PRE, "keep")
        return blocks

    def test_defaults_leave_blocks(self):
        blocks = process_blocks(self._blocks(), DEFAULT_CONFIG)
        assert blocks.get(SCRIPT) == [" var a = 1; "]
        assert blocks.get(STYLE) == [" p{} "]
        assert blocks.get(EVENT) == ["javascript:go()"]
        assert blocks.get(PRE) == ["keep"]

    def test_all_enabled(self):
        config = CompressionConfig(
            compress_javascript=True,
            compress_css=True,
            remove_javascript_protocol=True,
            javascript_compressor=UpperCompressor(),
            css_compressor=UpperCompressor(),
        )
        blocks = process_blocks(self._blocks(), config)
        assert blocks.get(SCRIPT) == ["VAR A = 1;"]
        assert blocks.get(STYLE) == ["P{}"]
        assert blocks.get(EVENT) == ["go()"]
        assert blocks.get(PRE) == ["keep"]

    def test_statistics_without_compression(self):
        stats = CompressionStatistics()
        process_blocks(self._blocks(), DEFAULT_CONFIG, stats)
        assert stats.original_metrics.inline_script_size == 12
        assert stats.original_metrics.inline_style_size == 5
        assert stats.original_metrics.inline_event_size == 15
        assert stats.preserved_size == 12 + 5 + 15 + 4

    def test_statistics_with_compression(self):
        stats = CompressionStatistics()
        config = CompressionConfig(
            compress_javascript=True,
            compress_css=True,
            remove_javascript_protocol=True,
            javascript_compressor=UpperCompressor(),
            css_compressor=UpperCompressor(),
        )
        process_blocks(self._blocks(), config, stats)
        assert stats.compressed_metrics.inline_script_size == 10
        assert stats.compressed_metrics.inline_style_size == 3
        assert stats.compressed_metrics.inline_event_size == 4
        # handlers and pre only
        assert stats.preserved_size == 4 + 4
