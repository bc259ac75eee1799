"""
Orphaned directive detection, run on the final text of a file.

Two checks:
  - #elif / #else / #endif with no open #if before it
  - #if still open at end of input
"""

from dataclasses import dataclass
from typing import List

from remover_core.core.directives import DirectiveKind
from remover_core.core.preprocess import scan_source
from remover_core.utils.log import get_logger

logger = get_logger("orphans")

_UNMATCHED_CLOSER = {
    DirectiveKind.ENDIF: "#endif without matching #if",
    DirectiveKind.ELIF: "#elif without matching #if",
    DirectiveKind.ELSE: "#else without matching #if",
}


@dataclass(frozen=True)
class OrphanedDirective:
    kind: DirectiveKind
    line: int
    text: str


def detect(text: str) -> List[OrphanedDirective]:
    orphans: List[OrphanedDirective] = []
    open_ifs = []
    for directive in scan_source(text).directives:
        kind = directive.kind
        if kind is DirectiveKind.IF:
            open_ifs.append(directive)
        elif kind in _UNMATCHED_CLOSER:
            if not open_ifs:
                orphans.append(OrphanedDirective(kind, directive.line, _UNMATCHED_CLOSER[kind]))
            elif kind is DirectiveKind.ENDIF:
                open_ifs.pop()

    for directive in reversed(open_ifs):
        orphans.append(OrphanedDirective(DirectiveKind.IF, directive.line, "#if without matching #endif"))

    for orphan in orphans:
        logger.warning(f"orphaned directive at line {orphan.line}: {orphan.text}")
    return orphans
