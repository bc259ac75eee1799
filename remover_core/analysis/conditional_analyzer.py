"""
Conditional analyzer

Builds one DirectiveBlock per target-relevant #if and assigns each block
the disabled text it owns.

Pass 1 (structure): depth walk from every target opener to its #endif,
collecting its own #elif / #else at depth 1.
Pass 2 (ownership): blocks in source order claim the scanner's disabled
spans that fall inside their dead region. A span is claimed at most once,
so an outer block that kills a whole region owns the text of any target
block nested in it.
"""

import traceback
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Set

from remover_core.analysis.blocks import (
    AnalysisIssue,
    AnalysisResult,
    BlockComplexity,
    DirectiveBlock,
)
from remover_core.analysis.classifier import classify_condition
from remover_core.core.directives import Directive, DirectiveKind, TextSpan
from remover_core.core.preprocess import ScanResult
from remover_core.utils.log import get_logger

logger = get_logger("analyzer")


class ConditionalAnalyzer:

    def __init__(self, target_symbols: Iterable[str]):
        self.target_symbols = tuple(target_symbols)
        self._lowered = tuple(s.lower() for s in self.target_symbols)

    def is_target_directive(self, directive: Directive) -> bool:
        if directive.kind is not DirectiveKind.IF or directive.condition_text is None:
            return False
        text = directive.condition_text.lower()
        return any(alias in text for alias in self._lowered)

    def analyze(self, scan: ScanResult) -> AnalysisResult:
        logger.info("analyze started")
        try:
            result = self._analyze(scan)
            logger.info(
                f"analyze finished: blocks={len(result.blocks)} "
                f"complex={len(result.complex_blocks)} issues={len(result.issues)}"
            )
            return result
        except Exception as e:
            logger.error("analyze failed: %s", e)
            logger.debug(traceback.format_exc())
            raise

    # ---------------- pass 1: structure ----------------

    def _analyze(self, scan: ScanResult) -> AnalysisResult:
        conditionals = [d for d in scan.directives if d.is_conditional]
        result = AnalysisResult()

        for index, opener in enumerate(conditionals):
            if not self.is_target_directive(opener):
                continue
            block = self._build_block(index, conditionals)
            if block is None:
                logger.debug(f"unmatched target #if at line {opener.line}")
                result.issues.append(AnalysisIssue(opener.line, "Unmatched #if directive", opener.start))
                continue
            result.issues.extend(_issues_for(block))
            result.blocks.append(block)

        result.blocks = self._assign_disabled_spans(result.blocks, scan.disabled_spans)
        return result

    def _build_block(self, index: int, conditionals: Sequence[Directive]) -> Optional[DirectiveBlock]:
        opener = conditionals[index]
        else_directive = None
        elifs: List[Directive] = []
        endif = None
        depth = 1
        for directive in conditionals[index + 1:]:
            kind = directive.kind
            if kind is DirectiveKind.IF:
                depth += 1
            elif kind is DirectiveKind.ELIF and depth == 1:
                elifs.append(directive)
            elif kind is DirectiveKind.ELSE and depth == 1:
                else_directive = directive
            elif kind is DirectiveKind.ENDIF:
                depth -= 1
                if depth == 0:
                    endif = directive
                    break
        if endif is None:
            return None

        traits = classify_condition(opener.condition, self.target_symbols)
        return DirectiveBlock(
            if_directive=opener,
            endif_directive=endif,
            else_directive=else_directive,
            elif_directives=tuple(elifs),
            is_negated=traits.is_negated,
            is_negated_boolean=traits.is_negated_boolean,
            has_boolean_expression=traits.has_boolean_expression,
            is_unrecognized=traits.is_unrecognized,
        )

    # ---------------- pass 2: disabled ranges ----------------

    def _assign_disabled_spans(self, blocks: List[DirectiveBlock],
                               disabled: Sequence[TextSpan]) -> List[DirectiveBlock]:
        claimed: Set[TextSpan] = set()
        assigned = []
        for block in blocks:
            region = dead_region(block)
            if region is None:
                assigned.append(block)
                continue
            owned = tuple(s for s in disabled if region.contains(s) and s not in claimed)
            claimed.update(owned)
            logger.debug(f"block at line {block.line} owns {len(owned)} disabled span(s)")
            assigned.append(replace(block, disabled_spans=owned))
        return assigned


def dead_region(block: DirectiveBlock) -> Optional[TextSpan]:
    """
    Text that is dead once the target is defined, or None when the block
    keeps all of its content (plain without #else) or is left for review.
    """
    if block.complexity is BlockComplexity.COMPLEX:
        return None
    if block.is_negated:
        stop = block.else_directive.start if block.has_else else block.endif_directive.start
        return TextSpan(block.if_directive.end, stop)
    if block.has_else:
        return TextSpan(block.else_directive.end, block.endif_directive.start)
    return None


def _issues_for(block: DirectiveBlock) -> List[AnalysisIssue]:
    line, offset = block.line, block.if_directive.start
    issues = []
    if block.has_elif:
        issues.append(AnalysisIssue(line, "Complex conditional with #elif - requires manual review", offset))
    if block.has_boolean_expression:
        issues.append(AnalysisIssue(line, "Boolean expression (&&/||) - requires manual review", offset))
    if block.is_negated_boolean:
        issues.append(AnalysisIssue(line, "Negated boolean expression - requires manual review", offset))
    if block.is_unrecognized:
        issues.append(AnalysisIssue(line, "Unsupported conditional pattern - requires manual review", offset))
    return issues
