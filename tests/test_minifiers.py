"""Tests for the JavaScript and CSS sub-compressors."""

from html_text_compressor import Compressor, CssMinifier, JavaScriptMinifier


class TestJavaScriptMinifier:
    def test_minifies(self):
        assert JavaScriptMinifier().compress("var  a = 1 ;\n") == "var a=1;"

    def test_drops_comments(self):
        result = JavaScriptMinifier().compress("/* note */\nvar a = 1; // trailing\n")
        assert "note" not in result
        assert "trailing" not in result

    def test_keep_bang_comments(self):
        source = "/*! license */\nvar a = 1;"
        assert "/*! license */" in JavaScriptMinifier(keep_bang_comments=True).compress(source)
        assert "license" not in JavaScriptMinifier().compress(source)

    def test_is_compressor(self):
        assert isinstance(JavaScriptMinifier(), Compressor)

    def test_repr(self):
        assert repr(JavaScriptMinifier()) == "JavaScriptMinifier(keep_bang_comments=False)"


class TestCssMinifier:
    def test_minifies(self):
        result = CssMinifier().compress("p  {\n  color : red ;\n}\n")
        assert result.startswith("p{color:red")
        assert " " not in result

    def test_keep_bang_comments(self):
        source = "/*! license */\np { color: red }"
        assert "/*! license */" in CssMinifier(keep_bang_comments=True).compress(source)
        assert "license" not in CssMinifier().compress(source)

    def test_is_compressor(self):
        assert isinstance(CssMinifier(), Compressor)
