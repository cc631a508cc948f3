"""Compression options and predefined constants."""

from __future__ import annotations

import dataclasses
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from html_text_compressor.minifiers import Compressor


# Tags that are very likely to be block-level.
BLOCK_TAGS_MIN = "html,head,body,br,p"

# Block-level tags by default, excluding <div> and <li>; table tags included.
BLOCK_TAGS_MAX = (
    BLOCK_TAGS_MIN
    + ",h1,h2,h3,h4,h5,h6,blockquote,center,dl,fieldset,form,frame,frameset,hr,"
    "noframes,ol,table,tbody,tr,td,th,tfoot,thead,ul"
)

# Remove spaces around every tag (not recommended).
ALL_TAGS = "all"

# --- Ready-made patterns for ``preserve_patterns`` ---
PHP_TAG_PATTERN = re.compile(r"<\?php.*?\?>", re.DOTALL | re.IGNORECASE)
SERVER_SCRIPT_TAG_PATTERN = re.compile(r"<%.*?%>", re.DOTALL)
SERVER_SIDE_INCLUDE_PATTERN = re.compile(r"<!--\s*#.*?-->", re.DOTALL)


def _compile_patterns(patterns: Any) -> tuple[re.Pattern[str], ...]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns or ():
        if isinstance(pattern, str):
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid regex pattern '{pattern}': {e}") from e
        else:
            compiled.append(pattern)
    return tuple(compiled)


def _has_tags(tag_list: str) -> bool:
    return any(tag.strip() for tag in tag_list.split(","))


@dataclasses.dataclass(frozen=True, slots=True)
class CompressionConfig:
    """Options for a single compression run.

    Instances are immutable. Derive variants with :func:`dataclasses.replace`
    or :meth:`with_options`; nested runs (conditional comments) always work on
    their own copy.
    """

    enabled: bool = True

    # default settings
    remove_comments: bool = True
    remove_multi_spaces: bool = True

    # optional settings
    remove_intertag_spaces: bool = False
    remove_quotes: bool = False
    compress_javascript: bool = False
    compress_css: bool = False
    simple_doctype: bool = False
    remove_script_attributes: bool = False
    remove_style_attributes: bool = False
    remove_link_attributes: bool = False
    remove_form_attributes: bool = False
    remove_input_attributes: bool = False
    simple_boolean_attributes: bool = False
    remove_javascript_protocol: bool = False
    remove_http_protocol: bool = False
    remove_https_protocol: bool = False
    preserve_line_breaks: bool = False
    remove_surrounding_spaces: str | None = None  # preset or "tag1,tag2"

    preserve_patterns: tuple[re.Pattern[str], ...] = ()
    javascript_compressor: Compressor | None = None
    css_compressor: Compressor | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "preserve_patterns", _compile_patterns(self.preserve_patterns))
        if self.remove_surrounding_spaces is not None and not _has_tags(self.remove_surrounding_spaces):
            object.__setattr__(self, "remove_surrounding_spaces", None)

    @classmethod
    def from_options(cls, **options: Any) -> CompressionConfig:
        """Build a config from keyword options, rejecting unknown names."""
        return DEFAULT_CONFIG.with_options(**options)

    def with_options(self, **options: Any) -> CompressionConfig:
        """Return a copy with the given options replaced."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ValueError(f"Unknown compression option(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **options)

    def copy(self) -> CompressionConfig:
        """Independent copy used for nested compression runs."""
        return dataclasses.replace(self)


DEFAULT_CONFIG = CompressionConfig()
