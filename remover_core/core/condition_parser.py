"""
PLY-based parser for preprocessor conditions (#if / #elif)

- Input: raw condition text, e.g. "!(NET8_0_OR_GREATER && DEBUG)"
- Output: a small immutable tree of condition nodes
- Grammar: identifiers, true/false, !, &&, ||, ==, !=, parentheses
- Parentheses are kept as Paren nodes; the classifier needs to see them
"""

import sys
import traceback
from dataclasses import dataclass
from typing import Any, Iterable

import ply.lex as lex
import ply.yacc as yacc

from remover_core.utils.log import get_logger

logger = get_logger("conditions")


# ------------------------------------------------------------------
# Condition nodes (closed set)
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Literal:
    value: bool


@dataclass(frozen=True)
class Not:
    operand: Any


@dataclass(frozen=True)
class And:
    left: Any
    right: Any


@dataclass(frozen=True)
class Or:
    left: Any
    right: Any


@dataclass(frozen=True)
class Compare:
    op: str
    left: Any
    right: Any


@dataclass(frozen=True)
class Paren:
    inner: Any


class ConditionSyntaxError(ValueError):
    """Raised when a directive condition cannot be parsed."""


# ------------------------------------------------------------------
# Lexer rules
# ------------------------------------------------------------------

_reserved = {
    "true": "TRUE",
    "false": "FALSE",
}

tokens = (
    "IDENTIFIER", "TRUE", "FALSE",
    "NOT", "AND", "OR", "EQ", "NEQ",
    "LPAREN", "RPAREN",
)

t_AND = r"&&"
t_OR = r"\|\|"
t_EQ = r"=="
t_NEQ = r"!="
t_NOT = r"!"
t_LPAREN = r"\("
t_RPAREN = r"\)"

t_ignore = " \t\f\v"


def t_IDENTIFIER(t):
    r"[^\W\d]\w*"
    t.type = _reserved.get(t.value, "IDENTIFIER")
    return t


def t_error(t):
    raise ConditionSyntaxError(
        f"Unexpected character {t.value[0]!r} in preprocessor expression"
    )


# ------------------------------------------------------------------
# Grammar rules
# ------------------------------------------------------------------

start = "expression"

precedence = (
    ("left", "OR"),
    ("left", "AND"),
    ("left", "EQ", "NEQ"),
    ("right", "NOT"),
)


def p_expression_binary(p):
    """expression : expression OR expression
                  | expression AND expression
                  | expression EQ expression
                  | expression NEQ expression"""
    op = p[2]
    if op == "||":
        p[0] = Or(p[1], p[3])
    elif op == "&&":
        p[0] = And(p[1], p[3])
    else:
        p[0] = Compare(op, p[1], p[3])


def p_expression_not(p):
    """expression : NOT expression"""
    p[0] = Not(p[2])


def p_expression_paren(p):
    """expression : LPAREN expression RPAREN"""
    p[0] = Paren(p[2])


def p_expression_identifier(p):
    """expression : IDENTIFIER"""
    p[0] = Identifier(p[1])


def p_expression_literal(p):
    """expression : TRUE
                  | FALSE"""
    p[0] = Literal(p[1] == "true")


def p_error(p):
    if p is None:
        raise ConditionSyntaxError("Unexpected end of preprocessor expression")
    raise ConditionSyntaxError(
        f"Unexpected token {p.value!r} in preprocessor expression"
    )


_lexer = lex.lex(module=sys.modules[__name__])
parser = yacc.yacc(
    module=sys.modules[__name__],
    debug=False,
    write_tables=False,
    errorlog=yacc.NullLogger(),
)


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def parse_condition(text: str):
    """
    Parse a condition string into a node tree.
    Raises ConditionSyntaxError on malformed input.
    """
    source = (text or "").strip()
    if not source:
        raise ConditionSyntaxError("Empty preprocessor expression")
    try:
        return parser.parse(source, lexer=_lexer.clone())
    except ConditionSyntaxError as e:
        logger.debug(f"parse_condition rejected {source!r}: {e}")
        raise
    except Exception as e:
        logger.error("parse_condition failed on %r: %s", source, e)
        logger.debug(traceback.format_exc())
        raise


def evaluate(node, defined: Iterable[str]) -> bool:
    """Truth value of a condition when exactly `defined` symbols are set."""
    symbols = defined if isinstance(defined, (set, frozenset)) else set(defined)
    return _eval(node, symbols)


def _eval(node, symbols) -> bool:
    if isinstance(node, Identifier):
        return node.name in symbols
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Not):
        return not _eval(node.operand, symbols)
    if isinstance(node, And):
        return _eval(node.left, symbols) and _eval(node.right, symbols)
    if isinstance(node, Or):
        return _eval(node.left, symbols) or _eval(node.right, symbols)
    if isinstance(node, Compare):
        same = _eval(node.left, symbols) == _eval(node.right, symbols)
        return same if node.op == "==" else not same
    if isinstance(node, Paren):
        return _eval(node.inner, symbols)
    raise TypeError(f"Unknown condition node: {type(node).__name__}")
