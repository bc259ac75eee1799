"""
Syntax check used by the verification gate.

Re-parses a whole file the way the compiler front end would see it:
scanner diagnostics (literals, comments, directive structure, #error),
illegal characters from the lexer, and bracket structure of the active
code. Returns diagnostics as values; never raises for bad input.
"""

from typing import Iterable, List

from remover_core.core.directives import Diagnostic
from remover_core.core.lexer_cs import lex_code
from remover_core.core.preprocess import scan_source
from remover_core.utils.log import get_logger

logger = get_logger("syntax")

_CLOSER_FOR = {"LPAREN": ")", "LBRACKET": "]", "LBRACE": "}"}
_OPENER_FOR = {"RPAREN": "LPAREN", "RBRACKET": "LBRACKET", "RBRACE": "LBRACE"}


def _bracket_diagnostics(tokens) -> List[Diagnostic]:
    found: List[Diagnostic] = []
    stack = []
    for tok in tokens:
        if tok.type == "ERROR":
            found.append(Diagnostic(tok.line, tok.column, f"Unexpected character {tok.value!r}"))
        elif tok.type in _CLOSER_FOR:
            stack.append(tok)
        elif tok.type in _OPENER_FOR:
            if not stack:
                found.append(Diagnostic(tok.line, tok.column, f"Unexpected {tok.value!r}"))
            elif stack[-1].type != _OPENER_FOR[tok.type]:
                opener = stack.pop()
                found.append(Diagnostic(
                    tok.line, tok.column,
                    f"{_CLOSER_FOR[opener.type]!r} expected but found {tok.value!r}",
                ))
            else:
                stack.pop()
    for opener in reversed(stack):
        found.append(Diagnostic(
            opener.line, opener.column,
            f"{_CLOSER_FOR[opener.type]!r} expected for {opener.value!r}",
        ))
    return found


def check_syntax(text: str, defined_symbols: Iterable[str] = ()) -> List[Diagnostic]:
    scan = scan_source(text, defined_symbols)
    diagnostics = list(scan.diagnostics)
    diagnostics.extend(_bracket_diagnostics(lex_code(scan.cleaned)))
    errors = sum(1 for d in diagnostics if d.is_error)
    logger.debug(f"check_syntax: {errors} error(s), {len(diagnostics) - errors} warning(s)")
    return diagnostics


def blocking_errors(diagnostics: Iterable[Diagnostic], sentinel: str) -> List[Diagnostic]:
    """Errors that were not produced by our own review markers."""
    return [d for d in diagnostics if d.is_error and sentinel not in d.message]
