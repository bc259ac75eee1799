"""Condition classifier tests."""

import pytest

from remover_core.analysis.blocks import BlockComplexity, derive_complexity
from remover_core.analysis.classifier import (
    classify_condition,
    contains_boolean,
    has_boolean_expression,
    is_bare_negation,
    is_negated_boolean,
)
from remover_core.core.condition_parser import parse_condition

SYMBOLS = ("NET8_0_OR_GREATER", "NET_8_0_OR_GREATER")


def parsed(text):
    return parse_condition(text)


class TestShapePredicates:
    """The three structural questions asked of an opener condition."""

    @pytest.mark.parametrize("text", ["!T", "!(T)", "(!T)", "((!(T)))"])
    def test_bare_negation(self, text):
        assert is_bare_negation(parsed(text))

    @pytest.mark.parametrize("text", ["T", "!!T", "!(T && D)", "!T && D"])
    def test_not_bare_negation(self, text):
        assert not is_bare_negation(parsed(text))

    @pytest.mark.parametrize("text", ["!(T && D)", "!(T || D)", "(!(A || B && C))"])
    def test_negated_boolean(self, text):
        assert is_negated_boolean(parsed(text))

    @pytest.mark.parametrize("text", ["!T", "!(T)", "!T && D", "!(T == D)"])
    def test_not_negated_boolean(self, text):
        assert not is_negated_boolean(parsed(text))

    @pytest.mark.parametrize("text", ["T && D", "T || D", "(T && D)", "!T || D", "!(!(T && D))"])
    def test_contains_boolean(self, text):
        assert contains_boolean(parsed(text))

    @pytest.mark.parametrize("text", ["T", "!T", "(T)", "T == D"])
    def test_no_boolean(self, text):
        assert not contains_boolean(parsed(text))

    def test_negated_boolean_is_not_also_boolean(self):
        tree = parsed("!(T && D)")
        assert contains_boolean(tree)
        assert not has_boolean_expression(tree)


class TestClassifyCondition:
    """Traits that feed block complexity."""

    def test_plain_target(self):
        traits = classify_condition(parsed("NET8_0_OR_GREATER"), SYMBOLS)
        assert not any([traits.is_negated, traits.is_negated_boolean,
                        traits.has_boolean_expression, traits.is_unrecognized])

    def test_parenthesised_alias(self):
        traits = classify_condition(parsed("(NET_8_0_OR_GREATER)"), SYMBOLS)
        assert not traits.is_unrecognized

    def test_negated_target(self):
        traits = classify_condition(parsed("!NET8_0_OR_GREATER"), SYMBOLS)
        assert traits.is_negated
        assert not traits.is_unrecognized

    def test_boolean(self):
        traits = classify_condition(parsed("NET8_0_OR_GREATER && WINDOWS"), SYMBOLS)
        assert traits.has_boolean_expression
        assert not traits.is_negated_boolean

    def test_negated_boolean(self):
        traits = classify_condition(parsed("!(NET8_0_OR_GREATER || WINDOWS)"), SYMBOLS)
        assert traits.is_negated_boolean
        assert not traits.has_boolean_expression

    def test_unparsable_condition(self):
        assert classify_condition(None, SYMBOLS).is_unrecognized

    @pytest.mark.parametrize("text", [
        "NET8_0_OR_GREATER == false",
        "!!NET8_0_OR_GREATER",
        "NET8_0_OR_GREATER_WINDOWS",
        "!NET8_0_OR_GREATER_WINDOWS",
        "true",
    ])
    def test_shapes_we_cannot_decide(self, text):
        assert classify_condition(parsed(text), SYMBOLS).is_unrecognized


class TestDeriveComplexity:
    """Precedence: elif > boolean > negated boolean > unrecognised > negated > simple."""

    def test_simple(self):
        assert derive_complexity(False, False, False, False) is BlockComplexity.SIMPLE

    def test_negated(self):
        assert derive_complexity(False, False, False, True) is BlockComplexity.NEGATED

    @pytest.mark.parametrize("flags", [
        (True, False, False, False),
        (False, True, False, False),
        (False, False, True, False),
        (True, False, False, True),
        (False, False, False, True, True),
    ])
    def test_complex(self, flags):
        assert derive_complexity(*flags) is BlockComplexity.COMPLEX
