"""Orphaned directive detection on final text."""

from remover_core.core.directives import DirectiveKind
from remover_core.utils.orphan_detector import detect


class TestOrphanDetector:
    """Closers need an open #if; every #if needs its #endif."""

    def test_balanced(self):
        assert detect("#if A\n#elif B\n#else\n#endif\n") == []

    def test_nested_balanced(self):
        assert detect("#if A\n#if B\n#endif\n#else\n#endif\n") == []

    def test_orphan_endif(self):
        orphans = detect("A\n#endif\n")
        assert len(orphans) == 1
        assert orphans[0].kind is DirectiveKind.ENDIF
        assert orphans[0].line == 2
        assert orphans[0].text == "#endif without matching #if"

    def test_orphan_else_and_elif(self):
        orphans = detect("#elif X\n#else\n")
        assert [o.text for o in orphans] == [
            "#elif without matching #if",
            "#else without matching #if",
        ]

    def test_unclosed_if(self):
        orphans = detect("#if A\n#if B\n#endif\n")
        assert len(orphans) == 1
        assert orphans[0].kind is DirectiveKind.IF
        assert orphans[0].line == 1
        assert orphans[0].text == "#if without matching #endif"

    def test_directive_text_in_strings_ignored(self):
        assert detect('var s = @"\n#endif\n";\n') == []

    def test_review_marker_is_not_an_orphan(self):
        assert detect("#error NET8_REVIEW_REQUIRED: x\n#if A && B\n#endif\n") == []
