"""
Verification gate

    ATTEMPT_BATCH --clean--> ACCEPTED --> DONE
          |
          +--errors--> RETRY --> PER_BLOCK(i) ... --> DONE

A candidate passes when re-parsing it yields no blocking errors. Errors
carrying the review sentinel never count. Every candidate is rewritten
from the original text, so accepted blocks keep their original offsets.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

from remover_core.analysis.blocks import DirectiveBlock
from remover_core.config import REVIEW_SENTINEL
from remover_core.core.syntax_check import blocking_errors, check_syntax
from remover_core.transform.rewriter import RewriteResult, rewrite
from remover_core.utils.log import get_logger

logger = get_logger("gate")


class GateState(Enum):
    ATTEMPT_BATCH = "attempt_batch"
    ACCEPTED = "accepted"
    RETRY = "retry"
    PER_BLOCK = "per_block"
    DONE = "done"


@dataclass
class GateOutcome:
    rewrite: RewriteResult
    succeeded: List[DirectiveBlock] = field(default_factory=list)
    failed: List[DirectiveBlock] = field(default_factory=list)
    trace: List[GateState] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.rewrite.text

    @property
    def used_fallback(self) -> bool:
        return GateState.RETRY in self.trace


class VerificationGate:

    def __init__(self, defined_symbols: Iterable[str], sentinel: str = REVIEW_SENTINEL,
                 checker: Optional[Callable] = None):
        self.defined_symbols = tuple(defined_symbols)
        self.sentinel = sentinel
        self.checker = checker or check_syntax

    def error_count(self, text: str) -> int:
        errors = blocking_errors(self.checker(text, self.defined_symbols), self.sentinel)
        for err in errors:
            logger.debug(f"syntax error {err}")
        return len(errors)

    def run(self, original: str, blocks: Sequence[DirectiveBlock]) -> GateOutcome:
        blocks = list(blocks)
        logger.info(f"gate started: {len(blocks)} candidate block(s)")

        candidate = None
        outcome = None
        accepted: List[DirectiveBlock] = []
        index = 0
        state = GateState.ATTEMPT_BATCH
        trace: List[GateState] = []

        while state is not GateState.DONE:
            trace.append(state)

            if state is GateState.ATTEMPT_BATCH:
                candidate = rewrite(original, blocks)
                if not blocks:
                    state = GateState.ACCEPTED
                    continue
                if self.error_count(candidate.text) == 0:
                    state = GateState.ACCEPTED
                else:
                    state = GateState.RETRY

            elif state is GateState.ACCEPTED:
                outcome = GateOutcome(candidate, succeeded=blocks)
                state = GateState.DONE

            elif state is GateState.RETRY:
                logger.info("batch rewrite introduced syntax errors, retrying block by block")
                outcome = GateOutcome(rewrite(original, []))
                state = GateState.PER_BLOCK

            elif state is GateState.PER_BLOCK:
                if index >= len(blocks):
                    state = GateState.DONE
                    continue
                block = blocks[index]
                index += 1
                candidate = rewrite(original, accepted + [block])
                if self.error_count(candidate.text) == 0:
                    accepted.append(block)
                    outcome.rewrite = candidate
                    outcome.succeeded.append(block)
                else:
                    logger.info(f"block at line {block.line} rejected: rewrite breaks the syntax")
                    outcome.failed.append(block)

        trace.append(GateState.DONE)
        outcome.trace = trace
        logger.info(
            f"gate finished: accepted={len(outcome.succeeded)} rejected={len(outcome.failed)}"
        )
        return outcome
