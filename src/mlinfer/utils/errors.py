"""
Error types and source location tracking for mlinfer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mlinfer.inference.types import Type


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """
    Represents a location in the source code of an expression.

    Attributes:
        line: 1-indexed line number
        column: 1-indexed column number
        offset: 0-indexed byte offset from start of source
        filename: Optional filename for error reporting
    """

    line: int
    column: int
    offset: int = 0
    filename: Optional[str] = None

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.line}:{self.column}"


class ErrorCode:
    """
    Catalog of error codes reported by inference.

    - E01xx: Type errors
    - E02xx: Input errors
    """

    E0101 = "E0101"  # type mismatch
    E0102 = "E0102"  # undefined variable
    E0113 = "E0113"  # infinite type (occurs check)

    E0204 = "E0204"  # invalid expression


class InferenceError(Exception):
    """Base exception for all mlinfer errors."""

    code: str = ""

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = []

        if self.location:
            parts.append(f"[{self.location}]")
        if self.code:
            parts.append(f"error[{self.code}]:")

        parts.append(self.message)
        return " ".join(parts)


class UnboundVariableError(InferenceError):
    """Raised when an identifier has no binding in the environment."""

    code = ErrorCode.E0102

    def __init__(self, name: str, location: Optional[SourceLocation] = None) -> None:
        self.name = name
        super().__init__(f"unbound variable '{name}'", location)


class OccursCheckError(InferenceError):
    """
    Raised when a placeholder would have to contain itself.

    Unifying ``'a`` with ``'a -> Int`` has no finite solution.
    """

    code = ErrorCode.E0113

    def __init__(
        self,
        variable: str,
        type_: Type,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.variable = variable
        self.type_ = type_
        super().__init__(
            f"occurs check failed: '{variable} occurs in {type_} (infinite type)",
            location,
        )


class UnificationError(InferenceError):
    """Raised when two types can never be made equal."""

    code = ErrorCode.E0101

    def __init__(
        self,
        left: Type,
        right: Type,
        location: Optional[SourceLocation] = None,
    ) -> None:
        self.left = left
        self.right = right
        super().__init__(f"cannot unify {left} with {right}", location)


class MalformedExpressionError(InferenceError):
    """Raised when a serialized expression tree cannot be loaded."""

    code = ErrorCode.E0204
