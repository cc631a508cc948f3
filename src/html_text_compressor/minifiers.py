"""Sub-compressors for inline JavaScript and CSS."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import rcssmin
import rjsmin


@runtime_checkable
class Compressor(Protocol):
    """Anything that turns source text into smaller source text."""

    def compress(self, text: str) -> str: ...


class JavaScriptMinifier:
    """Inline ``<script>`` minifier backed by rjsmin."""

    def __init__(self, keep_bang_comments: bool = False) -> None:
        self.keep_bang_comments = keep_bang_comments

    def compress(self, text: str) -> str:
        return rjsmin.jsmin(text, keep_bang_comments=self.keep_bang_comments)

    def __repr__(self) -> str:
        return f"JavaScriptMinifier(keep_bang_comments={self.keep_bang_comments})"


class CssMinifier:
    """Inline ``<style>`` minifier backed by rcssmin."""

    def __init__(self, keep_bang_comments: bool = False) -> None:
        self.keep_bang_comments = keep_bang_comments

    def compress(self, text: str) -> str:
        return rcssmin.cssmin(text, keep_bang_comments=self.keep_bang_comments)

    def __repr__(self) -> str:
        return f"CssMinifier(keep_bang_comments={self.keep_bang_comments})"
