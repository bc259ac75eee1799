"""
Review marker injector

Puts a build-breaking line right above the opener of every block that was
not transformed:

    #error NET8_REVIEW_REQUIRED: <reason>

The block itself stays exactly as it was below the marker.
"""

from typing import Collection, Iterable, List, Optional, Tuple

from remover_core.analysis.blocks import DirectiveBlock
from remover_core.config import REVIEW_SENTINEL
from remover_core.transform.rewriter import RewriteResult
from remover_core.utils.log import get_logger

logger = get_logger("markers")

REASON_COMPILATION_ERROR = "Transformation caused compilation error"
REASON_ELIF = "Complex conditional with #elif branches"
REASON_BOOLEAN = "Boolean expression (&&/||) requires manual simplification"
REASON_COMPLEX = "Complex conditional pattern"


def review_reason(block: DirectiveBlock, compilation_failed: bool = False) -> str:
    if compilation_failed:
        return REASON_COMPILATION_ERROR
    if block.has_elif:
        return REASON_ELIF
    if block.has_boolean_expression:
        return REASON_BOOLEAN
    return REASON_COMPLEX


def marker_line(reason: str, indent: str = "", newline: str = "\n",
                sentinel: str = REVIEW_SENTINEL) -> str:
    return f"{indent}#error {sentinel}: {reason}{newline}"


def _line_bounds(text: str, pos: int) -> Tuple[str, str]:
    """Indentation and terminator of the line starting at pos."""
    end = pos
    while end < len(text) and text[end] in " \t":
        end += 1
    indent = text[pos:end]
    nl = text.find("\n", pos)
    newline = "\r\n" if nl > 0 and text[nl - 1] == "\r" else "\n"
    return indent, newline


def _already_marked(text: str, pos: int, sentinel: str) -> bool:
    if pos == 0:
        return False
    prev_start = text.rfind("\n", 0, pos - 1) + 1
    previous = text[prev_start:pos].strip()
    return previous.startswith("#error") and sentinel in previous


def inject_markers(text: str, blocks: Iterable[DirectiveBlock],
                   compilation_failed: Collection[DirectiveBlock] = (),
                   rewrite: Optional[RewriteResult] = None,
                   sentinel: str = REVIEW_SENTINEL) -> str:
    """
    Insert one marker per block. Opener offsets refer to the source the
    blocks were analysed in; `rewrite` maps them into `text` when text is
    the rewritten version of that source.
    """
    blocks = list(blocks)
    failed_openers = {b.if_directive.start for b in compilation_failed}
    inserts: List[Tuple[int, str]] = []
    for block in blocks:
        opener = block.if_directive.start
        pos = rewrite.map_offset(opener) if rewrite is not None else opener
        if _already_marked(text, pos, sentinel):
            logger.debug(f"block at line {block.line} already carries a review marker")
            continue
        reason = review_reason(block, opener in failed_openers)
        indent, newline = _line_bounds(text, pos)
        inserts.append((pos, marker_line(reason, indent, newline, sentinel)))
        logger.debug(f"marker before line {block.line}: {reason}")

    for pos, marker in sorted(inserts, key=lambda item: item[0], reverse=True):
        text = text[:pos] + marker + text[pos:]
    logger.info(f"injected {len(inserts)} review marker(s)")
    return text
