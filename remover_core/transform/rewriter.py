"""
Rewriter

Deletes, for every designated block, its own #if/#else/#endif lines
(terminator included) and the disabled spans it owns. Everything else is
copied through unchanged.

Deletions are computed up front as (start, end) pairs against the text
they were located in, merged, and applied in one copy pass.
"""

import traceback
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from remover_core.analysis.blocks import DirectiveBlock
from remover_core.core.directives import TextSpan
from remover_core.utils.log import get_logger

logger = get_logger("rewriter")


class RewriteError(ValueError):
    """A designated directive is no longer where the analysis found it."""


@dataclass(frozen=True)
class RewriteResult:
    text: str
    deletions: Tuple[TextSpan, ...]

    @property
    def deleted_chars(self) -> int:
        return sum(span.length for span in self.deletions)

    def map_offset(self, offset: int) -> int:
        """Position in the rewritten text of an offset in the source text."""
        shift = 0
        for span in self.deletions:
            if span.start >= offset:
                break
            if offset < span.end:
                return span.start - shift
            shift += span.length
        return offset - shift


def deletion_spans(text: str, blocks: Iterable[DirectiveBlock]) -> List[TextSpan]:
    raw: List[TextSpan] = []
    for block in blocks:
        for directive in block.removable_directives:
            found = text[directive.start:directive.end].rstrip()
            if directive.end > len(text) or not found.endswith(directive.text):
                raise RewriteError(
                    f"#{directive.keyword} expected at line {directive.line}, "
                    f"found {found.strip()!r}"
                )
            raw.append(directive.full_span)
        raw.extend(block.disabled_spans)
    return _merge(raw)


def _merge(spans: List[TextSpan]) -> List[TextSpan]:
    merged: List[TextSpan] = []
    for span in sorted(spans, key=lambda s: (s.start, s.end)):
        if merged and span.start <= merged[-1].end:
            last = merged.pop()
            span = TextSpan(last.start, max(last.end, span.end))
        merged.append(span)
    return merged


def _swallow_final_terminator(text: str, spans: List[TextSpan]) -> List[TextSpan]:
    """
    A deletion running to end of input in a file without a final newline
    takes the line break before it too, so no new trailing newline appears.
    """
    if not spans or spans[-1].end != len(text) or text.endswith("\n"):
        return spans
    last = spans[-1]
    start = last.start
    if start > 0 and text[start - 1] == "\n":
        start -= 1
        if start > 0 and text[start - 1] == "\r":
            start -= 1
    spans = spans[:-1]
    return _merge(spans + [TextSpan(start, last.end)])


def apply_deletions(text: str, spans: List[TextSpan]) -> str:
    out = []
    pos = 0
    for span in spans:
        out.append(text[pos:span.start])
        pos = span.end
    out.append(text[pos:])
    return "".join(out)


def rewrite(text: str, blocks: Iterable[DirectiveBlock]) -> RewriteResult:
    """
    Remove the designated blocks from text.
    Raises RewriteError when a block's directives do not match text.
    """
    blocks = list(blocks)
    logger.debug(f"rewrite started: {len(blocks)} block(s)")
    try:
        spans = _swallow_final_terminator(text, deletion_spans(text, blocks))
        result = RewriteResult(apply_deletions(text, spans), tuple(spans))
        logger.debug(f"rewrite finished: {len(spans)} deletion(s), {result.deleted_chars} char(s)")
        return result
    except RewriteError as e:
        logger.error("rewrite failed: %s", e)
        raise
    except Exception as e:
        logger.error("rewrite failed: %s", e)
        logger.debug(traceback.format_exc())
        raise

