"""Tests for extraction of preserved regions."""

from html_text_compressor import DEFAULT_CONFIG, PHP_TAG_PATTERN, CompressionConfig
from html_text_compressor.extractor import PreservedBlocks, extract
from html_text_compressor.rules import (
    COND,
    EVENT,
    LINE_BREAK,
    PRE,
    SCRIPT,
    SKIP,
    STYLE,
    TEXTAREA,
    token_pattern,
)


def count_tokens(text: str, category: str) -> int:
    return len(token_pattern(category).findall(text))


class TestPreservedBlocks:
    def test_add_returns_sequential_tokens(self):
        blocks = PreservedBlocks()
        assert blocks.add(PRE, "a") == "%%%~COMPRESS~PRE~0~%%%"
        assert blocks.add(PRE, "b") == "%%%~COMPRESS~PRE~1~%%%"
        assert blocks.add(STYLE, "c") == "%%%~COMPRESS~STYLE~0~%%%"
        assert blocks.get(PRE) == ["a", "b"]
        assert len(blocks) == 3

    def test_get_missing_category(self):
        assert PreservedBlocks().get(SCRIPT) == []

    def test_iteration(self):
        blocks = PreservedBlocks()
        blocks.add(PRE, "a")
        blocks.add(EVENT, "b")
        assert list(blocks) == [(PRE, ["a"]), (EVENT, ["b"])]


class TestExtract:
    def test_pre(self):
        extraction = extract("<pre> a </pre>", DEFAULT_CONFIG)
        assert extraction.text == "<pre>%%%~COMPRESS~PRE~0~%%%</pre>"
        assert extraction.blocks.get(PRE) == [" a "]

    def test_blank_region_not_extracted(self):
        extraction = extract("<pre>   </pre><textarea></textarea>", DEFAULT_CONFIG)
        assert extraction.text == "<pre>   </pre><textarea></textarea>"
        assert len(extraction.blocks) == 0

    def test_nothing_to_extract(self):
        extraction = extract("<p>plain</p>", DEFAULT_CONFIG)
        assert extraction.text == "<p>plain</p>"
        assert len(extraction.blocks) == 0

    def test_script_style_textarea(self):
        html = "<script>a()</script><style>p{}</style><textarea>t</textarea>"
        extraction = extract(html, DEFAULT_CONFIG)
        assert extraction.text == (
            "<script>%%%~COMPRESS~SCRIPT~0~%%%</script>"
            "<style>%%%~COMPRESS~STYLE~0~%%%</style>"
            "<textarea>%%%~COMPRESS~TEXTAREA~0~%%%</textarea>"
        )
        assert extraction.blocks.get(SCRIPT) == ["a()"]
        assert extraction.blocks.get(STYLE) == ["p{}"]
        assert extraction.blocks.get(TEXTAREA) == ["t"]

    def test_skip_block_drops_markers(self):
        extraction = extract("<!-- {{{ --><p>  a  </p><!-- }}} -->", DEFAULT_CONFIG)
        assert extraction.text == "%%%~COMPRESS~SKIP~0~%%%"
        assert extraction.blocks.get(SKIP) == ["<p>  a  </p>"]

    def test_event_counter_shared_between_quote_styles(self):
        extraction = extract("<a onclick=\"a()\" onmouseover='b()'>", DEFAULT_CONFIG)
        assert extraction.text == (
            "<a onclick=\"%%%~COMPRESS~EVENT~0~%%%\" onmouseover='%%%~COMPRESS~EVENT~1~%%%'>"
        )
        assert extraction.blocks.get(EVENT) == ["a()", "b()"]

    def test_event_handler_spanning_lines_not_extracted(self):
        html = '<a onclick="a();\nb();">'
        assert extract(html, DEFAULT_CONFIG).text == html

    def test_user_pattern_takes_whole_match(self):
        config = CompressionConfig(preserve_patterns=(PHP_TAG_PATTERN,))
        extraction = extract("<p><?php echo 1; ?></p>", config)
        assert extraction.text == "<p>%%%~COMPRESS~USER0~0~%%%</p>"
        assert extraction.blocks.get("USER0") == ["<?php echo 1; ?>"]

    def test_earlier_rule_wins(self):
        extraction = extract("<pre><script>a()</script></pre>", DEFAULT_CONFIG)
        assert extraction.blocks.get(PRE) == ["<script>a()</script>"]
        assert extraction.blocks.get(SCRIPT) == []

    def test_conditional_comment_uses_nested_compressor(self):
        extraction = extract("<!--[if IE]>body<![endif]-->", DEFAULT_CONFIG, nested=str.upper)
        assert extraction.text == "%%%~COMPRESS~COND~0~%%%"
        assert extraction.blocks.get(COND) == ["<!--[if IE]>BODY<![endif]-->"]

    def test_conditional_comment_without_nested_compressor(self):
        extraction = extract("<!--[if IE]>body<![endif]-->", DEFAULT_CONFIG)
        assert extraction.blocks.get(COND) == ["<!--[if IE]>body<![endif]-->"]

    def test_jquery_template_left_in_place(self):
        html = '<script type="text/x-jquery-tmpl"><li>${name}</li></script>'
        extraction = extract(html, DEFAULT_CONFIG)
        assert extraction.text == html
        assert len(extraction.blocks) == 0

    def test_custom_script_type_goes_to_skip(self):
        extraction = extract('<script type="text/vbscript">x = 1</script>', DEFAULT_CONFIG)
        assert extraction.text == '<script type="text/vbscript">%%%~COMPRESS~SKIP~0~%%%</script>'
        assert extraction.blocks.get(SKIP) == ["x = 1"]
        assert extraction.blocks.get(SCRIPT) == []

    def test_line_breaks(self):
        config = CompressionConfig(preserve_line_breaks=True)
        extraction = extract("<p>a</p>\n  <p>b</p>", config)
        assert extraction.text == "<p>a</p>%%%~COMPRESS~LT~0~%%%<p>b</p>"
        assert extraction.blocks.get(LINE_BREAK) == ["\n"]

    def test_rules_returned(self):
        extraction = extract("<p>a</p>", DEFAULT_CONFIG)
        assert extraction.rules[0].category == SKIP


class TestCountTokens:
    def test_count(self):
        extraction = extract("<pre>a</pre><pre>b</pre><style>c</style>", DEFAULT_CONFIG)
        assert count_tokens(extraction.text, PRE) == 2
        assert count_tokens(extraction.text, STYLE) == 1
        assert count_tokens(extraction.text, SCRIPT) == 0

    def test_counts_match_buckets(self):
        html = '<pre>a</pre><a onclick="x()">y</a><script>z()</script><textarea>t</textarea>'
        extraction = extract(html, DEFAULT_CONFIG)
        for category, bucket in extraction.blocks:
            assert count_tokens(extraction.text, category) == len(bucket)
