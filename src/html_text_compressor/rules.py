"""Preservation rule catalog and placeholder token format.

Every region that must survive compaction untouched is described by a
:class:`PreservationRule`. The catalog returned by :func:`build_rules` is
ordered: earlier rules are extracted first and later rules only ever see the
already-substituted text, so a region claimed by one rule is invisible to the
next ones. Restoration walks the same categories in reverse.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Callable

from html_text_compressor.config import CompressionConfig

# --- Categories (bucket names) ---
USER = "USER"
SKIP = "SKIP"
COND = "COND"
EVENT = "EVENT"
PRE = "PRE"
SCRIPT = "SCRIPT"
STYLE = "STYLE"
TEXTAREA = "TEXTAREA"
LINE_BREAK = "LT"

# --- Placeholder tokens: %%%~COMPRESS~SCRIPT~0~%%% ---
TOKEN_OPEN = "%%%~"
TOKEN_CLOSE = "~%%%"
_TOKEN_PREFIX = TOKEN_OPEN + "COMPRESS~"


def user_category(index: int) -> str:
    """Category of the *index*-th custom preserve pattern."""
    return f"{USER}{index}"


def make_token(category: str, index: int) -> str:
    return f"{_TOKEN_PREFIX}{category}~{index}{TOKEN_CLOSE}"


def token_pattern(category: str) -> re.Pattern[str]:
    """Regex matching every token of *category*; group 1 is the index."""
    return re.compile(re.escape(f"{_TOKEN_PREFIX}{category}~") + r"(\d+)" + re.escape(TOKEN_CLOSE))


# --- Patterns for preserved regions ---
_SKIP_RE = re.compile(
    r"<!--\s*\{\{\{\s*-->(.*?)<!--\s*\}\}\}\s*-->",
    re.DOTALL | re.IGNORECASE,
)
_COND_COMMENT_RE = re.compile(
    r"(<!(?:--)?\[[^\]]+?]>)(.*?)(<!\[[^\]]+]-->)",
    re.DOTALL | re.IGNORECASE,
)
# on*="..." and on*='...', with backslash escapes, on a single line
_EVENT_DOUBLE_RE = re.compile(
    r"(\son[a-z]+\s*=\s*\")([^\"\\\r\n]*(?:\\.[^\"\\\r\n]*)*)(\")",
    re.IGNORECASE,
)
_EVENT_SINGLE_RE = re.compile(
    r"(\son[a-z]+\s*=\s*')([^'\\\r\n]*(?:\\.[^'\\\r\n]*)*)(')",
    re.IGNORECASE,
)
_PRE_RE = re.compile(r"(<pre[^>]*?>)(.*?)(</pre>)", re.DOTALL | re.IGNORECASE)
_SCRIPT_RE = re.compile(r"(<script[^>]*?>)(.*?)(</script>)", re.DOTALL | re.IGNORECASE)
_STYLE_RE = re.compile(r"(<style[^>]*?>)(.*?)(</style>)", re.DOTALL | re.IGNORECASE)
_TEXTAREA_RE = re.compile(r"(<textarea[^>]*?>)(.*?)(</textarea>)", re.DOTALL | re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"(?:[ \t]*(\r?\n)[ \t]*)+")

_TYPE_ATTR_RE = re.compile(r"\btype\s*=\s*([\"']?)([^\"'\s>]*)\1", re.IGNORECASE)

JAVASCRIPT_TYPES = frozenset({"", "text/javascript", "application/javascript"})
TEMPLATE_TYPES = frozenset({"text/x-jquery-tmpl"})

# A router decides the bucket for a match; None leaves the match in place.
Router = Callable[[re.Match[str]], "str | None"]


@dataclasses.dataclass(frozen=True, slots=True)
class PreservationRule:
    """One extraction rule.

    ``content_group`` selects the text that goes into the bucket (and is
    checked by ``skip_if_blank``). With ``keep_delimiters`` the groups 1 and 3
    stay in the document around the token; otherwise the whole match is
    replaced. ``recursive_compress`` stores ``group1 + compress(content) +
    group3``.
    """

    name: str
    pattern: re.Pattern[str]
    category: str
    content_group: int = 2
    keep_delimiters: bool = True
    recursive_compress: bool = False
    skip_if_blank: bool = True
    router: Router | None = None

    def route(self, match: re.Match[str]) -> str | None:
        if self.router is None:
            return self.category
        return self.router(match)


def script_type(open_tag: str) -> str:
    """Lower-cased value of the ``type`` attribute of a ``<script>`` tag."""
    m = _TYPE_ATTR_RE.search(open_tag)
    return m.group(2).lower() if m else ""


def _route_script(match: re.Match[str]) -> str | None:
    kind = script_type(match.group(1))
    if kind in JAVASCRIPT_TYPES:
        return SCRIPT
    if kind in TEMPLATE_TYPES:
        # compacted together with the rest of the markup
        return None
    # custom script types are kept away from both the JS compressor and compaction
    return SKIP


def build_rules(config: CompressionConfig) -> tuple[PreservationRule, ...]:
    """Ordered extraction catalog for *config*."""
    rules: list[PreservationRule] = [
        PreservationRule(
            name=f"user pattern {p}",
            pattern=pattern,
            category=user_category(p),
            content_group=0,
            keep_delimiters=False,
        )
        for p, pattern in enumerate(config.preserve_patterns)
    ]
    rules += [
        PreservationRule("skip block", _SKIP_RE, SKIP, content_group=1, keep_delimiters=False),
        PreservationRule(
            "conditional comment", _COND_COMMENT_RE, COND,
            keep_delimiters=False, recursive_compress=True,
        ),
        PreservationRule("event handler (double quotes)", _EVENT_DOUBLE_RE, EVENT),
        PreservationRule("event handler (single quotes)", _EVENT_SINGLE_RE, EVENT),
        PreservationRule("pre", _PRE_RE, PRE),
        PreservationRule("script", _SCRIPT_RE, SCRIPT, router=_route_script),
        PreservationRule("style", _STYLE_RE, STYLE),
        PreservationRule("textarea", _TEXTAREA_RE, TEXTAREA),
    ]
    if config.preserve_line_breaks:
        rules.append(PreservationRule(
            "line break", _LINE_BREAK_RE, LINE_BREAK,
            content_group=1, keep_delimiters=False, skip_if_blank=False,
        ))
    return tuple(rules)


def extraction_order(rules: tuple[PreservationRule, ...]) -> list[str]:
    """Categories in the order they are first filled by *rules*."""
    order: list[str] = []
    for rule in rules:
        if rule.category not in order:
            order.append(rule.category)
    return order


def restoration_order(rules: tuple[PreservationRule, ...]) -> list[str]:
    """Categories in the order tokens must be put back."""
    return list(reversed(extraction_order(rules)))
