"""
Condition classifier

Decides the shape of an opener's condition tree:
  (a) bare negation     !T            (redundant parens allowed: !(T), (!T))
  (b) negated boolean   !(A && B)     !(A || B)
  (c) boolean           any && / || reachable through ! and ( )
A negated boolean is never also reported as boolean.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from remover_core.core.condition_parser import And, Identifier, Not, Or, Paren


def strip_parens(node):
    while isinstance(node, Paren):
        node = node.inner
    return node


def is_bare_negation(node) -> bool:
    node = strip_parens(node)
    return isinstance(node, Not) and isinstance(strip_parens(node.operand), Identifier)


def is_negated_boolean(node) -> bool:
    node = strip_parens(node)
    if not isinstance(node, Not) or not isinstance(node.operand, Paren):
        return False
    return isinstance(strip_parens(node.operand), (And, Or))


def contains_boolean(node) -> bool:
    if isinstance(node, (And, Or)):
        return True
    if isinstance(node, Not):
        return contains_boolean(node.operand)
    if isinstance(node, Paren):
        return contains_boolean(node.inner)
    return False


def has_boolean_expression(node) -> bool:
    return not is_negated_boolean(node) and contains_boolean(node)


def _names_symbol(node, symbols) -> bool:
    node = strip_parens(node)
    return isinstance(node, Identifier) and node.name in symbols


@dataclass(frozen=True)
class ConditionTraits:
    is_negated: bool = False
    is_negated_boolean: bool = False
    has_boolean_expression: bool = False
    # anything we cannot decide once the target is assumed defined:
    # unparsable text, == / !=, literals, double negation, foreign identifiers
    is_unrecognized: bool = False


def classify_condition(condition: Optional[object], symbols: Iterable[str]) -> ConditionTraits:
    if condition is None:
        return ConditionTraits(is_unrecognized=True)
    symbols = set(symbols)
    if is_negated_boolean(condition):
        return ConditionTraits(is_negated_boolean=True)
    if contains_boolean(condition):
        return ConditionTraits(has_boolean_expression=True)
    if is_bare_negation(condition):
        operand = strip_parens(condition).operand
        if _names_symbol(operand, symbols):
            return ConditionTraits(is_negated=True)
        return ConditionTraits(is_negated=True, is_unrecognized=True)
    if _names_symbol(condition, symbols):
        return ConditionTraits()
    return ConditionTraits(is_unrecognized=True)
