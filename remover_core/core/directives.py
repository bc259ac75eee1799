"""
Record types shared by the lexical layer.

• TextSpan    - half-open [start, end) offset pair into the source
• Directive   - one preprocessor line located by the scanner
• Diagnostic  - a syntax problem found while scanning / checking
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any


class DirectiveKind(Enum):
    IF = "if"
    ELIF = "elif"
    ELSE = "else"
    ENDIF = "endif"
    OTHER = "other"


# keyword after '#' -> kind
_KIND_BY_KEYWORD = {
    "if": DirectiveKind.IF,
    "elif": DirectiveKind.ELIF,
    "else": DirectiveKind.ELSE,
    "endif": DirectiveKind.ENDIF,
}


def kind_for_keyword(keyword: str) -> DirectiveKind:
    return _KIND_BY_KEYWORD.get(keyword, DirectiveKind.OTHER)


@dataclass(frozen=True)
class TextSpan:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: "TextSpan") -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: "TextSpan") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Directive:
    """
    A directive line.

    start     - offset of the first character of the line (indentation included)
    end       - offset just past the directive text (line terminator excluded)
    line_end  - offset just past the line terminator (== end on the last line)
    """
    kind: DirectiveKind
    keyword: str
    start: int
    end: int
    line_end: int
    line: int
    text: str
    condition_text: Optional[str] = None
    condition: Optional[Any] = None
    active: bool = True

    @property
    def span(self) -> TextSpan:
        return TextSpan(self.start, self.end)

    @property
    def full_span(self) -> TextSpan:
        return TextSpan(self.start, self.line_end)

    @property
    def is_conditional(self) -> bool:
        return self.kind is not DirectiveKind.OTHER


@dataclass(frozen=True)
class Diagnostic:
    line: int
    column: int
    message: str
    severity: str = "error"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self):
        return f"({self.line},{self.column}): {self.severity}: {self.message}"


def line_and_column(text: str, offset: int):
    """1-based (line, column) of offset inside text."""
    line = text.count("\n", 0, offset) + 1
    last_nl = text.rfind("\n", 0, offset)
    return line, offset - last_nl
