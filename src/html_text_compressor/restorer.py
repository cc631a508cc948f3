"""Putting preserved blocks back in place of their tokens."""

from __future__ import annotations

import logging
import re

from html_text_compressor.extractor import PreservedBlocks
from html_text_compressor.rules import PreservationRule, restoration_order, token_pattern

logger = logging.getLogger(__name__)


def _restore_category(html: str, category: str, blocks: PreservedBlocks, done: list[str]) -> str:
    bucket = blocks.get(category)

    def _replace(m: re.Match[str]) -> str:
        digits = m.group(1)
        if len(digits) > len(str(len(bucket))) or int(digits) >= len(bucket):
            # unknown token: leave it as it is
            logger.debug("no %s block for token %r, left in place", category, m.group(0))
            return m.group(0)
        block = bucket[int(digits)]
        # a block can hold tokens of categories extracted after it
        return _restore(block, blocks, done) if done else block

    return token_pattern(category).sub(_replace, html)


def _restore(html: str, blocks: PreservedBlocks, order: list[str]) -> str:
    for position, category in enumerate(order):
        html = _restore_category(html, category, blocks, order[:position])
    return html


def restore(html: str, blocks: PreservedBlocks, rules: tuple[PreservationRule, ...]) -> str:
    """Replace every known token in *html* with its block.

    Categories are restored in the reverse order of extraction. Tokens whose
    index has no block (or whose category is unknown) stay in the output
    verbatim; restoration never fails.
    """
    return _restore(html, blocks, restoration_order(rules))
