"""
Unit tests for type representation and substitution.

Tests for:
- Rendering of type schemes
- Single-placeholder substitution, including capture avoidance
- Ordered application, composition and merging of substitutions
- Fresh placeholder names
"""

import pytest

from mlinfer.inference.types import (
    BOOLEAN_TYPE,
    NUMERIC_TYPE,
    STRING_TYPE,
    FunctionType,
    PolymorphicType,
    Substitution,
    TypeVariable,
    TypeVariableSupply,
    substitute,
)

a = TypeVariable("a")
b = TypeVariable("b")
c = TypeVariable("c")


# =============================================================================
# Rendering
# =============================================================================


class TestTypeRendering:
    """Tests for the textual form of types."""

    @pytest.mark.parametrize(
        "type_, expected",
        [
            (NUMERIC_TYPE, "Int"),
            (BOOLEAN_TYPE, "Bool"),
            (STRING_TYPE, "String"),
            (a, "'a"),
            (FunctionType(a, NUMERIC_TYPE), "'a -> Int"),
            (FunctionType(a, FunctionType(b, c)), "'a -> 'b -> 'c"),
            (FunctionType(FunctionType(a, b), c), "('a -> 'b) -> 'c"),
            (PolymorphicType(("a",), FunctionType(a, a)), "forall 'a. 'a -> 'a"),
            (PolymorphicType(("a", "b"), FunctionType(a, b)), "forall 'a 'b. 'a -> 'b"),
        ],
    )
    def test_str(self, type_, expected):
        assert str(type_) == expected

    def test_structural_equality(self):
        """Types with the same shape compare equal and hash alike."""
        assert FunctionType(TypeVariable("a"), NUMERIC_TYPE) == FunctionType(a, NUMERIC_TYPE)
        assert len({FunctionType(a, b), FunctionType(a, b)}) == 1


# =============================================================================
# Substitute
# =============================================================================


class TestSubstitute:
    """Tests for replacing one placeholder."""

    def test_base_types_unchanged(self):
        for base in (NUMERIC_TYPE, BOOLEAN_TYPE, STRING_TYPE):
            assert substitute(BOOLEAN_TYPE, "a", base) == base

    def test_replaces_matching_variable(self):
        assert substitute(NUMERIC_TYPE, "a", a) == NUMERIC_TYPE

    def test_other_variable_unchanged(self):
        assert substitute(NUMERIC_TYPE, "a", b) == b

    def test_replaces_every_occurrence(self):
        result = substitute(STRING_TYPE, "a", FunctionType(a, FunctionType(b, a)))
        assert result == FunctionType(STRING_TYPE, FunctionType(b, STRING_TYPE))

    def test_bound_name_is_not_replaced(self):
        """A polymorphic node quantifying the name is left alone."""
        scheme = PolymorphicType(("a",), FunctionType(a, b))
        assert substitute(NUMERIC_TYPE, "a", scheme) is scheme

    def test_pushes_into_polymorphic_body(self):
        scheme = PolymorphicType(("a",), FunctionType(a, b))
        result = substitute(NUMERIC_TYPE, "b", scheme)
        assert result == PolymorphicType(("a",), FunctionType(a, NUMERIC_TYPE))


# =============================================================================
# Substitution
# =============================================================================


class TestSubstitution:
    """Tests for ordered substitution lists."""

    def test_empty_is_identity(self):
        type_ = FunctionType(a, b)
        assert Substitution.empty().apply(type_) == type_
        assert len(Substitution.empty()) == 0

    def test_applies_oldest_rule_first(self):
        """The tail rule runs first, so a later rule can refine its result."""
        subst = Substitution([("b", NUMERIC_TYPE), ("a", b)])
        assert subst.apply(a) == NUMERIC_TYPE

    def test_order_matters(self):
        subst = Substitution([("a", b), ("b", NUMERIC_TYPE)])
        assert subst.apply(a) == b

    def test_compose(self):
        s1 = Substitution([("a", NUMERIC_TYPE)])
        s2 = Substitution([("b", FunctionType(a, c))])
        target = FunctionType(b, a)

        composed = s1.compose(s2)

        assert composed.apply(target) == s1.apply(s2.apply(target))
        assert composed.apply(target) == FunctionType(
            FunctionType(NUMERIC_TYPE, c), NUMERIC_TYPE
        )

    @pytest.mark.parametrize(
        "target",
        [a, b, c, FunctionType(a, b), FunctionType(FunctionType(c, a), b), NUMERIC_TYPE],
    )
    def test_compose_law(self, target):
        s1 = Substitution([("c", BOOLEAN_TYPE), ("a", FunctionType(b, b))])
        s2 = Substitution([("b", c)])
        assert s1.compose(s2).apply(target) == s1.apply(s2.apply(target))

    def test_extend_refines_existing_rules(self):
        subst = Substitution([("a", FunctionType(b, b))]).extend("b", NUMERIC_TYPE)
        assert subst.bindings == (
            ("b", NUMERIC_TYPE),
            ("a", FunctionType(NUMERIC_TYPE, NUMERIC_TYPE)),
        )

    def test_str(self):
        subst = Substitution([("a", NUMERIC_TYPE), ("b", FunctionType(a, a))])
        assert str(subst) == "{'a := Int, 'b := 'a -> 'a}"
        assert str(Substitution.empty()) == "{}"


# =============================================================================
# Fresh Placeholders
# =============================================================================


class TestTypeVariableSupply:
    """Tests for fresh placeholder names."""

    def test_names_start_at_a(self, supply):
        assert [supply.fresh() for _ in range(3)] == [a, b, c]

    def test_names_wrap_with_suffix(self, supply):
        names = [supply.fresh_name() for _ in range(54)]
        assert names[25] == "z"
        assert names[26] == "a1"
        assert names[53] == "b2"
        assert len(set(names)) == len(names)

    def test_reset(self, supply):
        supply.fresh()
        supply.fresh()
        supply.reset()
        assert supply.counter == 0
        assert supply.fresh() == a

    def test_supplies_are_independent(self):
        first = TypeVariableSupply()
        second = TypeVariableSupply()
        first.fresh()
        assert second.fresh() == a
