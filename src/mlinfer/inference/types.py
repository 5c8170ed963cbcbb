"""
Type representation and substitution for mlinfer.

The type system has three base types (Int, Bool, String), placeholders
(type variables introduced during inference), single-argument function types
and universally quantified polymorphic schemes. Types are immutable and
compare structurally.

A substitution is an ordered list of rules ``name -> type``, newest first.
Applying it folds from the oldest rule to the newest so a placeholder that
was resolved early can still be refined by a later rule.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator


# =============================================================================
# Type Schemes
# =============================================================================


class Type(ABC):
    """
    Base class for all type schemes.

    Types are immutable and support structural equality.
    """

    @abstractmethod
    def __str__(self) -> str:
        """Return a human-readable string representation of the type."""
        pass


@dataclass(frozen=True)
class PrimitiveType(Type):
    """
    A base type with no payload.

    Supported primitives: Int, Bool, String
    """

    name: str

    def __str__(self) -> str:
        return self.name


# Singleton instances for primitive types
NUMERIC_TYPE = PrimitiveType("Int")
BOOLEAN_TYPE = PrimitiveType("Bool")
STRING_TYPE = PrimitiveType("String")


@dataclass(frozen=True)
class TypeVariable(Type):
    """A placeholder for a type that inference has not resolved yet."""

    name: str

    def __str__(self) -> str:
        return f"'{self.name}"


@dataclass(frozen=True)
class FunctionType(Type):
    """
    A single-argument function type.

    Example: Int -> Bool
    """

    domain: Type
    codomain: Type

    def __str__(self) -> str:
        domain = str(self.domain)
        if isinstance(self.domain, (FunctionType, PolymorphicType)):
            domain = f"({domain})"
        return f"{domain} -> {self.codomain}"


@dataclass(frozen=True)
class PolymorphicType(Type):
    """
    A type universally quantified over some placeholders.

    Example: forall 'a. 'a -> 'a

    Never appears in a constraint directly; it is instantiated first.
    ``bound`` lists each quantified name once, in order of first appearance
    in the body.
    """

    bound: tuple[str, ...]
    body: Type

    def __str__(self) -> str:
        names = " ".join(f"'{name}" for name in self.bound)
        return f"forall {names}. {self.body}"


def substitute(replacement: Type, name: str, target: Type) -> Type:
    """
    Replace every occurrence of the placeholder ``name`` in ``target``.

    A polymorphic node that binds ``name`` is returned unchanged, since the
    placeholder inside it is a different, quantified variable.
    """
    if isinstance(target, PrimitiveType):
        return target
    if isinstance(target, TypeVariable):
        return replacement if target.name == name else target
    if isinstance(target, FunctionType):
        return FunctionType(
            substitute(replacement, name, target.domain),
            substitute(replacement, name, target.codomain),
        )
    if isinstance(target, PolymorphicType):
        if name in target.bound:
            return target
        return PolymorphicType(target.bound, substitute(replacement, name, target.body))
    raise TypeError(f"not a type: {target!r}")


# =============================================================================
# Substitutions
# =============================================================================


class Substitution:
    """
    An ordered sequence of ``(placeholder name, type)`` rules, newest first.

    Usage:
        subst = Substitution.empty().extend("a", NUMERIC_TYPE)
        subst.apply(FunctionType(TypeVariable("a"), TypeVariable("a")))
        # Int -> Int
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Iterable[tuple[str, Type]] = ()) -> None:
        self._bindings: tuple[tuple[str, Type], ...] = tuple(bindings)

    @classmethod
    def empty(cls) -> Substitution:
        return cls()

    @property
    def bindings(self) -> tuple[tuple[str, Type], ...]:
        return self._bindings

    def apply(self, target: Type) -> Type:
        """Apply every rule to ``target``, from the tail of the list to the head."""
        result = target
        for name, replacement in reversed(self._bindings):
            result = substitute(replacement, name, result)
        return result

    def compose(self, other: Substitution) -> Substitution:
        """
        Compose two substitutions.

        ``self.compose(other).apply(t) == self.apply(other.apply(t))``
        """
        return Substitution(self._bindings + other._bindings)

    def extend(self, name: str, replacement: Type) -> Substitution:
        """
        Merge a newly discovered rule.

        The rule is pushed into the right-hand side of every existing rule and
        then prepended as the newest binding.
        """
        updated = tuple(
            (existing, substitute(replacement, name, type_))
            for existing, type_ in self._bindings
        )
        return Substitution(((name, replacement),) + updated)

    def __iter__(self) -> Iterator[tuple[str, Type]]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Substitution):
            return NotImplemented
        return self._bindings == other._bindings

    def __hash__(self) -> int:
        return hash(self._bindings)

    def __repr__(self) -> str:
        return f"Substitution({list(self._bindings)!r})"

    def __str__(self) -> str:
        if not self._bindings:
            return "{}"
        rules = ", ".join(f"'{name} := {type_}" for name, type_ in self._bindings)
        return "{" + rules + "}"


# =============================================================================
# Fresh Placeholder Names
# =============================================================================


_ALPHABET = "abcdefghijklmnopqrstuvwxyz"


class TypeVariableSupply:
    """
    Generates fresh, uniquely named placeholders for one inference run.

    Names run a, b, ..., z, a1, b1, ..., z1, a2, ... and are never reused
    until ``reset`` is called. Each inference run owns its own supply, so
    independent runs do not interfere.
    """

    def __init__(self) -> None:
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def fresh_name(self) -> str:
        index = self._counter
        self._counter += 1
        letter = _ALPHABET[index % len(_ALPHABET)]
        generation = index // len(_ALPHABET)
        return letter if generation == 0 else f"{letter}{generation}"

    def fresh(self) -> TypeVariable:
        """Return a placeholder that has not been handed out since the last reset."""
        return TypeVariable(self.fresh_name())

    def reset(self) -> None:
        self._counter = 0
