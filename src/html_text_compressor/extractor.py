"""Extraction of preserved regions into placeholder tokens."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterator

from html_text_compressor.config import CompressionConfig
from html_text_compressor.rules import PreservationRule, build_rules, make_token

logger = logging.getLogger(__name__)


@dataclasses.dataclass(slots=True)
class PreservedBlocks:
    """Per-category buckets of extracted text.

    A token's index is the position of its text in the category's bucket, so
    appending is the only way to allocate a token.
    """

    buckets: dict[str, list[str]] = dataclasses.field(default_factory=dict)

    def add(self, category: str, text: str) -> str:
        """Store *text* and return the token that stands in for it."""
        bucket = self.buckets.setdefault(category, [])
        bucket.append(text)
        return make_token(category, len(bucket) - 1)

    def get(self, category: str) -> list[str]:
        return self.buckets.get(category, [])

    def __iter__(self) -> Iterator[tuple[str, list[str]]]:
        return iter(self.buckets.items())

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.buckets.values())


@dataclasses.dataclass(frozen=True, slots=True)
class Extraction:
    """Token-substituted markup plus the blocks it refers to."""

    text: str
    blocks: PreservedBlocks
    rules: tuple[PreservationRule, ...]


def _apply_rule(
    html: str,
    rule: PreservationRule,
    blocks: PreservedBlocks,
    nested: Callable[[str], str] | None,
) -> str:
    """Run one rule over *html*, replacing each preservable match by a token."""
    result: list[str] = []
    prev_end = 0

    for match in rule.pattern.finditer(html):
        content = match.group(rule.content_group) or ""
        if rule.skip_if_blank and not content.strip():
            continue

        category = rule.route(match)
        if category is None:
            continue

        if rule.recursive_compress:
            inner = nested(content) if nested is not None else content
            stored = match.group(1) + inner + match.group(3)
        else:
            stored = content

        token = blocks.add(category, stored)
        result.append(html[prev_end:match.start()])
        if rule.keep_delimiters:
            result.append(match.group(1) + token + match.group(3))
        else:
            result.append(token)
        prev_end = match.end()

    if prev_end == 0:
        return html

    result.append(html[prev_end:])
    return "".join(result)


def extract(
    html: str,
    config: CompressionConfig,
    nested: Callable[[str], str] | None = None,
) -> Extraction:
    """Replace every preserved region of *html* with a placeholder token.

    Args:
        html: Raw markup.
        config: Options of the current run (selects custom patterns and
            line-break preservation).
        nested: Compressor applied to conditional-comment bodies. It must be
            an independent run so its tokens never mix with ours.

    Returns:
        The substituted text and the filled buckets.
    """
    rules = build_rules(config)
    blocks = PreservedBlocks()

    for rule in rules:
        html = _apply_rule(html, rule, blocks, nested)

    if logger.isEnabledFor(logging.DEBUG):
        counts = ", ".join(f"{category}={len(bucket)}" for category, bucket in blocks)
        logger.debug("extracted %d block(s): %s", len(blocks), counts or "none")

    return Extraction(text=html, blocks=blocks, rules=rules)
