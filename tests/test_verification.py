"""Verification gate state machine tests."""

from remover_core.analysis.conditional_analyzer import ConditionalAnalyzer
from remover_core.core.directives import Diagnostic
from remover_core.core.preprocess import scan_source
from remover_core.transform.verification import GateState, VerificationGate


def blocks_of(code, target="T"):
    scan = scan_source(code, [target])
    return ConditionalAnalyzer([target]).analyze(scan).blocks


def breaks_without(marker):
    """Checker reporting one error whenever `marker` has disappeared from the text."""

    def checker(text, symbols):
        if marker in text:
            return []
        return [Diagnostic(1, 1, "; expected")]

    return checker


TWO_BLOCKS = "#if T\nA\n#endif\n#if T // keep\nB\n#endif\n"


class TestBatchPath:
    """One parse when the batch rewrite is clean."""

    def test_clean_batch_accepted(self):
        code = "#if T\nA\n#else\nB\n#endif\n"
        blocks = blocks_of(code)
        outcome = VerificationGate(["T"]).run(code, blocks)
        assert outcome.text == "A\n"
        assert outcome.succeeded == blocks
        assert outcome.failed == []
        assert outcome.trace == [GateState.ATTEMPT_BATCH, GateState.ACCEPTED, GateState.DONE]
        assert not outcome.used_fallback

    def test_no_blocks(self):
        code = "class C { }\n"
        outcome = VerificationGate(["T"]).run(code, [])
        assert outcome.text == code
        assert outcome.succeeded == []

    def test_sentinel_errors_ignored(self):
        code = "#error NET8_REVIEW_REQUIRED: Complex conditional pattern\n#if T\nA\n#endif\n"
        outcome = VerificationGate(["T"]).run(code, blocks_of(code))
        assert len(outcome.succeeded) == 1


class TestPerBlockFallback:
    """A failing batch is retried one block at a time from the original text."""

    def test_offending_block_rejected(self):
        blocks = blocks_of(TWO_BLOCKS)
        gate = VerificationGate(["T"], checker=breaks_without("// keep"))
        outcome = gate.run(TWO_BLOCKS, blocks)

        assert outcome.succeeded == [blocks[0]]
        assert outcome.failed == [blocks[1]]
        assert outcome.text == "A\n#if T // keep\nB\n#endif\n"
        assert outcome.used_fallback
        assert outcome.trace == [
            GateState.ATTEMPT_BATCH,
            GateState.RETRY,
            GateState.PER_BLOCK,
            GateState.PER_BLOCK,
            GateState.PER_BLOCK,
            GateState.DONE,
        ]

    def test_later_blocks_keep_original_offsets(self):
        """Accepting an earlier block must not shift the next one."""
        code = "#if T // keep\nA\n#endif\n#if T\nB\n#else\nC\n#endif\nZ\n"
        blocks = blocks_of(code)
        gate = VerificationGate(["T"], checker=breaks_without("// keep"))
        outcome = gate.run(code, blocks)
        assert outcome.failed == [blocks[0]]
        assert outcome.succeeded == [blocks[1]]
        assert outcome.text == "#if T // keep\nA\n#endif\nB\nZ\n"

    def test_everything_rejected_leaves_original(self):
        code = "#if T\nA\n#endif\n"
        gate = VerificationGate(["T"], checker=breaks_without("#if"))
        outcome = gate.run(code, blocks_of(code))
        assert outcome.text == code
        assert outcome.succeeded == []
        assert len(outcome.failed) == 1

    def test_broken_source_rejects_block(self):
        """Any remaining error rejects the block, even one already in the source."""
        code = "class C {\n#if T\nA\n#endif\n"
        blocks = blocks_of(code)
        outcome = VerificationGate(["T"]).run(code, blocks)
        assert outcome.succeeded == []
        assert outcome.failed == blocks
        assert outcome.text == code
