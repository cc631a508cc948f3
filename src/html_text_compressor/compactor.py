"""Generic HTML compaction passes.

The passes run over token-substituted markup, so script, style, pre and the
other preserved regions are already out of the way. Order matters: attribute
removal leaves double spaces behind that the whitespace passes clean up, and
the inside-tag trimming relies on whitespace already being collapsed.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Callable

from html_text_compressor.config import ALL_TAGS, BLOCK_TAGS_MAX, BLOCK_TAGS_MIN, CompressionConfig
from html_text_compressor.rules import TOKEN_CLOSE, TOKEN_OPEN

logger = logging.getLogger(__name__)

_DS = re.DOTALL | re.IGNORECASE

_COMMENT_RE = re.compile(r"<!---->|<!--[^\[].*?-->", _DS)
_DOCTYPE_RE = re.compile(r"<!DOCTYPE[^>]*>", _DS)

# --- Redundant attributes ---
_JS_TYPE_ATTR_RE = re.compile(
    r"(<script[^>]*)type\s*=\s*([\"']*)(?:text|application)/javascript\2([^>]*>)", _DS
)
_JS_LANG_ATTR_RE = re.compile(r"(<script[^>]*)language\s*=\s*([\"']*)javascript\2([^>]*>)", _DS)
_STYLE_TYPE_ATTR_RE = re.compile(r"(<style[^>]*)type\s*=\s*([\"']*)text/css\2([^>]*>)", _DS)
_LINK_TYPE_ATTR_RE = re.compile(r"(<link[^>]*)type\s*=\s*([\"']*)text/(?:css|plain)\2([^>]*>)", _DS)
_LINK_REL_ATTR_RE = re.compile(
    r"<link(?:[^>]*)rel\s*=\s*([\"']*)(?:alternate\s+)?stylesheet\1(?:[^>]*)>", _DS
)
_FORM_METHOD_ATTR_RE = re.compile(r"(<form[^>]*)method\s*=\s*([\"']*)get\2([^>]*>)", _DS)
_INPUT_TYPE_ATTR_RE = re.compile(r"(<input[^>]*)type\s*=\s*([\"']*)text\2([^>]*>)", _DS)
_BOOLEAN_ATTR_RE = re.compile(
    r"(<\w+[^>]*)(checked|selected|disabled|readonly)\s*=\s*([\"']*)\w*\3([^>]*>)", _DS
)

# --- Protocols ---
_HTTP_PROTOCOL_RE = re.compile(r"(<[^>]+?(?:href|src|cite|action)\s*=\s*['\"])http:(//[^>]+?>)", _DS)
_HTTPS_PROTOCOL_RE = re.compile(r"(<[^>]+?(?:href|src|cite|action)\s*=\s*['\"])https:(//[^>]+?>)", _DS)
_REL_EXTERNAL_RE = re.compile(r"<(?:[^>]*)rel\s*=\s*([\"']*)(?:alternate\s+)?external\1(?:[^>]*)>", _DS)

# --- Whitespace ---
_O, _C = re.escape(TOKEN_OPEN), re.escape(TOKEN_CLOSE)
_INTERTAG_TAG_TAG_RE = re.compile(r">\s+<", _DS)
_INTERTAG_TAG_TOKEN_RE = re.compile(rf">\s+{_O}", _DS)
_INTERTAG_TOKEN_TAG_RE = re.compile(rf"{_C}\s+<", _DS)
_INTERTAG_TOKEN_TOKEN_RE = re.compile(rf"{_C}\s+{_O}", _DS)
_MULTISPACE_RE = re.compile(r"\s+", _DS)

# --- Inside tags ---
_TAG_PROPERTY_RE = re.compile(r"(\s\w+)\s*=\s*(?=[^<]*?>)", re.IGNORECASE)
_TAG_END_SPACE_RE = re.compile(r"(<(?:[^>]+?))(?:\s+?)(/?>)", _DS)
_TAG_LAST_UNQUOTED_VALUE_RE = re.compile(r"=\s*[a-z0-9_-]+$", re.IGNORECASE)
_TAG_QUOTE_RE = re.compile(r"\s*=\s*([\"'])([a-z0-9_-]+?)\1(/?)(?=[^<]*?>)", re.IGNORECASE)

_SURROUNDING_TEMPLATE = r"\s*(</?(?:{tags})(?:>|[\s/][^>]*>))\s*"
_SURROUNDING_ALL_RE = re.compile(r"\s*(<[^>]+>)\s*", _DS)


def _surrounding_re(tag_list: str) -> re.Pattern[str]:
    tags = "|".join(re.escape(tag.strip()) for tag in tag_list.split(",") if tag.strip())
    return re.compile(_SURROUNDING_TEMPLATE.format(tags=tags), _DS)


_SURROUNDING_MIN_RE = _surrounding_re(BLOCK_TAGS_MIN)
_SURROUNDING_MAX_RE = _surrounding_re(BLOCK_TAGS_MAX)


def remove_comments(html: str, config: CompressionConfig) -> str:
    return _COMMENT_RE.sub("", html)


def simple_doctype(html: str, config: CompressionConfig) -> str:
    return _DOCTYPE_RE.sub("<!DOCTYPE html>", html)


def remove_script_attributes(html: str, config: CompressionConfig) -> str:
    html = _JS_TYPE_ATTR_RE.sub(r"\1\3", html)
    return _JS_LANG_ATTR_RE.sub(r"\1\3", html)


def remove_style_attributes(html: str, config: CompressionConfig) -> str:
    return _STYLE_TYPE_ATTR_RE.sub(r"\1\3", html)


def remove_link_attributes(html: str, config: CompressionConfig) -> str:
    """Drop ``type`` from stylesheet links only."""

    def _replace(m: re.Match[str]) -> str:
        if _LINK_REL_ATTR_RE.fullmatch(m.group(0)):
            return m.group(1) + m.group(3)
        return m.group(0)

    return _LINK_TYPE_ATTR_RE.sub(_replace, html)


def remove_form_attributes(html: str, config: CompressionConfig) -> str:
    return _FORM_METHOD_ATTR_RE.sub(r"\1\3", html)


def remove_input_attributes(html: str, config: CompressionConfig) -> str:
    return _INPUT_TYPE_ATTR_RE.sub(r"\1\3", html)


def simple_boolean_attributes(html: str, config: CompressionConfig) -> str:
    return _BOOLEAN_ATTR_RE.sub(r"\1\2\4", html)


def _strip_protocol(html: str, pattern: re.Pattern[str]) -> str:
    def _replace(m: re.Match[str]) -> str:
        # rel="external" links keep their scheme
        if _REL_EXTERNAL_RE.fullmatch(m.group(0)):
            return m.group(0)
        return m.group(1) + m.group(2)

    return pattern.sub(_replace, html)


def remove_http_protocol(html: str, config: CompressionConfig) -> str:
    return _strip_protocol(html, _HTTP_PROTOCOL_RE)


def remove_https_protocol(html: str, config: CompressionConfig) -> str:
    return _strip_protocol(html, _HTTPS_PROTOCOL_RE)


def remove_intertag_spaces(html: str, config: CompressionConfig) -> str:
    html = _INTERTAG_TAG_TAG_RE.sub("><", html)
    html = _INTERTAG_TAG_TOKEN_RE.sub(">" + TOKEN_OPEN, html)
    html = _INTERTAG_TOKEN_TAG_RE.sub(TOKEN_CLOSE + "<", html)
    return _INTERTAG_TOKEN_TOKEN_RE.sub(TOKEN_CLOSE + TOKEN_OPEN, html)


def remove_multi_spaces(html: str, config: CompressionConfig) -> str:
    return _MULTISPACE_RE.sub(" ", html)


def remove_spaces_inside_tags(html: str, config: CompressionConfig) -> str:
    """Trim spaces around ``=`` and before the end of a tag.

    A space before ``/>`` survives when the last attribute value is unquoted,
    otherwise the slash would become part of the value.
    """
    html = _TAG_PROPERTY_RE.sub(r"\1=", html)

    def _replace(m: re.Match[str]) -> str:
        if m.group(2).startswith("/") and _TAG_LAST_UNQUOTED_VALUE_RE.search(m.group(1)):
            return f"{m.group(1)} {m.group(2)}"
        return m.group(1) + m.group(2)

    return _TAG_END_SPACE_RE.sub(_replace, html)


def remove_quotes_inside_tags(html: str, config: CompressionConfig) -> str:
    def _replace(m: re.Match[str]) -> str:
        if not m.group(3).strip():
            return "=" + m.group(2)
        return f"={m.group(2)} {m.group(3)}"

    return _TAG_QUOTE_RE.sub(_replace, html)


def remove_surrounding_spaces(html: str, config: CompressionConfig) -> str:
    tag_list = config.remove_surrounding_spaces or ""
    if tag_list.lower() == ALL_TAGS:
        pattern = _SURROUNDING_ALL_RE
    elif tag_list.lower() == BLOCK_TAGS_MIN:
        pattern = _SURROUNDING_MIN_RE
    elif tag_list.lower() == BLOCK_TAGS_MAX:
        pattern = _SURROUNDING_MAX_RE
    else:
        pattern = _surrounding_re(tag_list)
    return pattern.sub(r"\1", html)


def _always(config: CompressionConfig) -> bool:
    return True


def _flag(name: str) -> Callable[[CompressionConfig], bool]:
    def _enabled(config: CompressionConfig) -> bool:
        return bool(getattr(config, name))

    return _enabled


@dataclasses.dataclass(frozen=True, slots=True)
class CompactionPass:
    """A named transform and the switch that turns it on."""

    name: str
    enabled: Callable[[CompressionConfig], bool]
    apply: Callable[[str, CompressionConfig], str]


COMPACTION_PASSES: tuple[CompactionPass, ...] = (
    CompactionPass("remove_comments", _flag("remove_comments"), remove_comments),
    CompactionPass("simple_doctype", _flag("simple_doctype"), simple_doctype),
    CompactionPass("remove_script_attributes", _flag("remove_script_attributes"), remove_script_attributes),
    CompactionPass("remove_style_attributes", _flag("remove_style_attributes"), remove_style_attributes),
    CompactionPass("remove_link_attributes", _flag("remove_link_attributes"), remove_link_attributes),
    CompactionPass("remove_form_attributes", _flag("remove_form_attributes"), remove_form_attributes),
    CompactionPass("remove_input_attributes", _flag("remove_input_attributes"), remove_input_attributes),
    CompactionPass("simple_boolean_attributes", _flag("simple_boolean_attributes"), simple_boolean_attributes),
    CompactionPass("remove_http_protocol", _flag("remove_http_protocol"), remove_http_protocol),
    CompactionPass("remove_https_protocol", _flag("remove_https_protocol"), remove_https_protocol),
    CompactionPass("remove_intertag_spaces", _flag("remove_intertag_spaces"), remove_intertag_spaces),
    CompactionPass("remove_multi_spaces", _flag("remove_multi_spaces"), remove_multi_spaces),
    CompactionPass("remove_spaces_inside_tags", _always, remove_spaces_inside_tags),
    CompactionPass("remove_quotes", _flag("remove_quotes"), remove_quotes_inside_tags),
    CompactionPass("remove_surrounding_spaces", _flag("remove_surrounding_spaces"), remove_surrounding_spaces),
)


def compact(html: str, config: CompressionConfig) -> str:
    """Apply every enabled compaction pass, in order, then strip the result."""
    applied: list[str] = []
    for compaction in COMPACTION_PASSES:
        if compaction.enabled(config):
            html = compaction.apply(html, config)
            applied.append(compaction.name)
    logger.debug("compaction passes applied: %s", ", ".join(applied))
    return html.strip()
