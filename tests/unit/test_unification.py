"""
Unit tests for the unification engine.

Tests for:
- The occurs check, including its treatment of quantified names
- Single unification passes (decomposition, rewriting, failures)
- The fixed-point driver and its resulting substitution
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
)
from mlinfer.inference.unification import (
    Constraint,
    occurs_check,
    unify,
    unify_constraints,
    unify_substitutions,
)
from mlinfer.utils.errors import (
    ErrorCode,
    OccursCheckError,
    SourceLocation,
    UnificationError,
)

a = TypeVariable("a")
b = TypeVariable("b")
c = TypeVariable("c")


# =============================================================================
# Occurs Check
# =============================================================================


class TestOccursCheck:
    """Tests for detecting self-referential placeholders."""

    def test_base_type(self):
        assert not occurs_check("a", NUMERIC_TYPE)

    def test_same_variable(self):
        assert occurs_check("a", a)
        assert not occurs_check("a", b)

    def test_nested_in_function(self):
        assert occurs_check("a", FunctionType(b, FunctionType(NUMERIC_TYPE, a)))
        assert not occurs_check("a", FunctionType(b, c))

    def test_polymorphic_body(self):
        assert occurs_check("b", PolymorphicType(("a",), FunctionType(a, b)))

    def test_quantified_name_counts_as_occurrence(self):
        """A name bound by the scheme is reported even though it is not free."""
        assert occurs_check("a", PolymorphicType(("a",), NUMERIC_TYPE))


# =============================================================================
# Single Pass
# =============================================================================


class TestUnifyConstraints:
    """Tests for one left-to-right unification pass."""

    def test_empty(self):
        assert unify_constraints([]) == []

    @pytest.mark.parametrize("base", [NUMERIC_TYPE, BOOLEAN_TYPE, STRING_TYPE])
    def test_equal_base_types_are_discarded(self, base):
        assert unify_constraints([Constraint(base, base)]) == []

    def test_variable_with_itself_is_discarded(self):
        assert unify_constraints([Constraint(a, a)]) == []

    def test_variable_on_either_side(self):
        assert unify_constraints([Constraint(a, NUMERIC_TYPE)]) == [("a", NUMERIC_TYPE)]
        assert unify_constraints([Constraint(NUMERIC_TYPE, a)]) == [("a", NUMERIC_TYPE)]

    def test_two_variables_bind_left(self):
        assert unify_constraints([Constraint(a, b)]) == [("a", b)]

    def test_rule_rewrites_remaining_constraints(self):
        rules = unify_constraints([Constraint(a, NUMERIC_TYPE), Constraint(a, b)])
        assert rules == [("a", NUMERIC_TYPE), ("b", NUMERIC_TYPE)]

    def test_functions_decompose(self):
        rules = unify_constraints(
            [Constraint(FunctionType(a, b), FunctionType(NUMERIC_TYPE, BOOLEAN_TYPE))]
        )
        assert rules == [("a", NUMERIC_TYPE), ("b", BOOLEAN_TYPE)]

    def test_mismatched_base_types(self):
        with pytest.raises(UnificationError) as exc_info:
            unify_constraints([Constraint(NUMERIC_TYPE, BOOLEAN_TYPE)])
        assert exc_info.value.left == NUMERIC_TYPE
        assert exc_info.value.right == BOOLEAN_TYPE
        assert exc_info.value.code == ErrorCode.E0101

    def test_base_type_against_function(self):
        with pytest.raises(UnificationError) as exc_info:
            unify_constraints([Constraint(NUMERIC_TYPE, FunctionType(a, b))])
        assert exc_info.value.right == FunctionType(a, b)

    def test_mismatch_inside_function(self):
        with pytest.raises(UnificationError):
            unify_constraints(
                [Constraint(FunctionType(NUMERIC_TYPE, a), FunctionType(STRING_TYPE, a))]
            )

    def test_polymorphic_operand_is_rejected(self):
        scheme = PolymorphicType(("a",), FunctionType(a, a))
        with pytest.raises(UnificationError):
            unify_constraints([Constraint(scheme, FunctionType(b, b))])

    def test_occurs_check_failure(self):
        with pytest.raises(OccursCheckError) as exc_info:
            unify_constraints([Constraint(a, FunctionType(a, NUMERIC_TYPE))])
        assert exc_info.value.variable == "a"
        assert exc_info.value.type_ == FunctionType(a, NUMERIC_TYPE)
        assert exc_info.value.code == ErrorCode.E0113

    def test_error_reports_constraint_origin(self):
        origin = SourceLocation(3, 7)
        with pytest.raises(UnificationError) as exc_info:
            unify_constraints(
                [Constraint(FunctionType(NUMERIC_TYPE, a), FunctionType(BOOLEAN_TYPE, a), origin)]
            )
        assert exc_info.value.location == origin
        assert str(exc_info.value).startswith("[3:7]")


# =============================================================================
# Fixed Point
# =============================================================================


class TestUnify:
    """Tests for solving constraint lists to a substitution."""

    def test_empty(self):
        assert unify([]) == Substitution.empty()

    def test_chain_is_fully_resolved(self):
        constraints = [
            Constraint(a, FunctionType(b, c)),
            Constraint(c, NUMERIC_TYPE),
            Constraint(b, BOOLEAN_TYPE),
        ]
        subst = unify(constraints)

        assert subst.apply(a) == FunctionType(BOOLEAN_TYPE, NUMERIC_TYPE)
        assert subst.bindings == (
            ("b", BOOLEAN_TYPE),
            ("c", NUMERIC_TYPE),
            ("a", FunctionType(BOOLEAN_TYPE, NUMERIC_TYPE)),
        )

    def test_solution_satisfies_constraints(self):
        constraints = [
            Constraint(FunctionType(a, a), FunctionType(b, c)),
            Constraint(c, FunctionType(NUMERIC_TYPE, TypeVariable("d"))),
        ]
        subst = unify(constraints)
        for constraint in constraints:
            assert subst.apply(constraint.left) == subst.apply(constraint.right)

    def test_idempotent(self):
        constraints = [
            Constraint(a, FunctionType(b, c)),
            Constraint(b, c),
            Constraint(c, STRING_TYPE),
        ]
        subst = unify(constraints)
        for type_ in (a, b, c, FunctionType(a, b)):
            once = subst.apply(type_)
            assert subst.apply(once) == once

    def test_starts_from_accumulated(self):
        accumulated = Substitution([("z", FunctionType(a, a))])
        subst = unify_substitutions(accumulated, [Constraint(a, NUMERIC_TYPE)])
        assert subst.apply(TypeVariable("z")) == FunctionType(NUMERIC_TYPE, NUMERIC_TYPE)

    def test_failure_aborts(self):
        with pytest.raises(UnificationError):
            unify([Constraint(a, NUMERIC_TYPE), Constraint(a, STRING_TYPE)])


class TestConstraint:
    """Tests for the constraint value type."""

    def test_equality_ignores_origin(self):
        assert Constraint(a, b, SourceLocation(1, 1)) == Constraint(a, b)

    def test_str(self):
        assert str(Constraint(a, FunctionType(NUMERIC_TYPE, b))) == "'a = Int -> 'b"

    def test_substitute_keeps_origin(self):
        origin = SourceLocation(2, 5)
        rewritten = Constraint(a, b, origin).substitute(NUMERIC_TYPE, "a")
        assert rewritten == Constraint(NUMERIC_TYPE, b)
        assert rewritten.origin == origin
