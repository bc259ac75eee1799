from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from remover_core.core.directives import Directive, TextSpan


class BlockComplexity(Enum):
    SIMPLE = "simple"
    NEGATED = "negated"
    COMPLEX = "complex"


def derive_complexity(has_elif: bool, has_boolean_expression: bool,
                      is_negated_boolean: bool, is_negated: bool,
                      is_unrecognized: bool = False) -> BlockComplexity:
    if has_elif or has_boolean_expression or is_negated_boolean or is_unrecognized:
        return BlockComplexity.COMPLEX
    if is_negated:
        return BlockComplexity.NEGATED
    return BlockComplexity.SIMPLE


@dataclass(frozen=True)
class DirectiveBlock:
    """
    One complete #if..#endif construct bound to the target symbol.

    disabled_spans holds the inactive text owned by this block only; spans
    of nested or sibling blocks are never listed here.
    """
    if_directive: Directive
    endif_directive: Directive
    else_directive: Optional[Directive] = None
    elif_directives: Tuple[Directive, ...] = ()
    is_negated: bool = False
    is_negated_boolean: bool = False
    has_boolean_expression: bool = False
    is_unrecognized: bool = False
    disabled_spans: Tuple[TextSpan, ...] = ()

    @property
    def has_else(self) -> bool:
        return self.else_directive is not None

    @property
    def has_elif(self) -> bool:
        return len(self.elif_directives) > 0

    @property
    def complexity(self) -> BlockComplexity:
        return derive_complexity(self.has_elif, self.has_boolean_expression,
                                 self.is_negated_boolean, self.is_negated,
                                 self.is_unrecognized)

    @property
    def removable_directives(self) -> Tuple[Directive, ...]:
        """Directive lines the rewriter deletes when this block is transformed."""
        own = [self.if_directive, self.else_directive, self.endif_directive]
        return tuple(d for d in own if d is not None)

    @property
    def line(self) -> int:
        return self.if_directive.line


@dataclass(frozen=True)
class AnalysisIssue:
    line: int
    message: str
    offset: int = 0

    def __str__(self):
        return f"line {self.line}: {self.message}"


@dataclass
class AnalysisResult:
    blocks: List[DirectiveBlock] = field(default_factory=list)
    issues: List[AnalysisIssue] = field(default_factory=list)

    @property
    def simple_blocks(self) -> List[DirectiveBlock]:
        return [b for b in self.blocks if b.complexity is not BlockComplexity.COMPLEX]

    @property
    def complex_blocks(self) -> List[DirectiveBlock]:
        return [b for b in self.blocks if b.complexity is BlockComplexity.COMPLEX]
