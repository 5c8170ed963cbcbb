"""
Let-polymorphism: generalization and instantiation of type schemes.

``generalize`` quantifies the placeholders of a type that the enclosing
environment does not constrain, turning ``'a -> 'a`` into
``forall 'a. 'a -> 'a``. ``instantiate`` does the reverse for one use site,
replacing every quantified name with a fresh placeholder so two uses of the
same binding are solved independently.
"""

from __future__ import annotations

from mlinfer.inference.environment import TypeEnvironment
from mlinfer.inference.types import (
    FunctionType,
    PolymorphicType,
    PrimitiveType,
    Type,
    TypeVariable,
    TypeVariableSupply,
    substitute,
)


def free_type_variables(type_: Type) -> list[str]:
    """
    Placeholder names reachable in ``type_``, in order of first appearance.

    Names quantified by an enclosing polymorphic node are not free.
    """
    names: list[str] = []
    _collect_free(type_, frozenset(), names)
    return names


def _collect_free(type_: Type, bound: frozenset[str], names: list[str]) -> None:
    if isinstance(type_, PrimitiveType):
        return
    if isinstance(type_, TypeVariable):
        if type_.name not in bound and type_.name not in names:
            names.append(type_.name)
    elif isinstance(type_, FunctionType):
        _collect_free(type_.domain, bound, names)
        _collect_free(type_.codomain, bound, names)
    elif isinstance(type_, PolymorphicType):
        _collect_free(type_.body, bound | frozenset(type_.bound), names)


def free_type_variables_in_environment(environment: TypeEnvironment) -> list[str]:
    """Union of the free placeholders of every scheme bound in ``environment``."""
    names: list[str] = []
    for _, scheme in environment:
        for name in free_type_variables(scheme):
            if name not in names:
                names.append(name)
    return names


def generalize(environment: TypeEnvironment, type_: Type) -> Type:
    """
    Quantify the placeholders of ``type_`` that are not free in ``environment``.

    Placeholders still free in the environment belong to an outer scope and
    stay monomorphic. If nothing is left to quantify the type is returned
    unchanged.
    """
    owned_by_outer_scope = set(free_type_variables_in_environment(environment))
    quantified = tuple(
        name for name in free_type_variables(type_) if name not in owned_by_outer_scope
    )
    if not quantified:
        return type_
    return PolymorphicType(quantified, type_)


def instantiate(scheme: Type, supply: TypeVariableSupply) -> Type:
    """Replace each quantified name of a polymorphic scheme with a fresh placeholder."""
    if not isinstance(scheme, PolymorphicType):
        return scheme

    result = scheme.body
    for name in scheme.bound:
        result = substitute(supply.fresh(), name, result)
    return result


def normalize(type_: Type) -> Type:
    """
    Rename placeholders to a, b, c, ... in order of first appearance.

    Two types are alpha-equivalent exactly when their normal forms are equal.
    """
    renaming: dict[str, str] = {}
    supply = TypeVariableSupply()

    def rename(name: str) -> str:
        if name not in renaming:
            renaming[name] = supply.fresh_name()
        return renaming[name]

    def walk(current: Type) -> Type:
        if isinstance(current, TypeVariable):
            return TypeVariable(rename(current.name))
        if isinstance(current, FunctionType):
            return FunctionType(walk(current.domain), walk(current.codomain))
        if isinstance(current, PolymorphicType):
            body = walk(current.body)
            return PolymorphicType(tuple(rename(name) for name in current.bound), body)
        return current

    return walk(type_)


def alpha_equivalent(left: Type, right: Type) -> bool:
    """Check whether two types are equal up to consistent renaming of placeholders."""
    return normalize(left) == normalize(right)
