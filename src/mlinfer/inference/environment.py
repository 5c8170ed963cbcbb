"""
Typing environment for mlinfer.

An environment is an ordered sequence of ``(name, type scheme)`` bindings,
most recent first. Lookup returns the first match, which gives lexical
shadowing for nested lets and function parameters. Environments are never
mutated; extending one produces a new environment.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Optional

from mlinfer.inference.types import Type


class TypeEnvironment:
    """
    Immutable chain of variable bindings.

    Usage:
        env = TypeEnvironment.empty().extend("x", NUMERIC_TYPE)
        env.lookup("x")  # Int
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Iterable[tuple[str, Type]] = ()) -> None:
        self._bindings: tuple[tuple[str, Type], ...] = tuple(bindings)

    @classmethod
    def empty(cls) -> TypeEnvironment:
        return cls()

    def extend(self, name: str, scheme: Type) -> TypeEnvironment:
        """Return a copy of this environment with ``name`` bound in front."""
        return TypeEnvironment(((name, scheme),) + self._bindings)

    def lookup(self, name: str) -> Optional[Type]:
        """Look up the innermost binding of ``name``."""
        for bound_name, scheme in self._bindings:
            if bound_name == name:
                return scheme
        return None

    def map_types(self, fn: Callable[[Type], Type]) -> TypeEnvironment:
        """Return a new environment with ``fn`` applied to every scheme."""
        return TypeEnvironment((name, fn(scheme)) for name, scheme in self._bindings)

    def __contains__(self, name: object) -> bool:
        return any(bound_name == name for bound_name, _ in self._bindings)

    def __iter__(self) -> Iterator[tuple[str, Type]]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"TypeEnvironment({list(self._bindings)!r})"
