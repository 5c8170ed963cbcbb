"""
mlinfer Utilities Package.

Common utilities for error handling and source locations.
"""

from mlinfer.utils.errors import (
    ErrorCode,
    InferenceError,
    MalformedExpressionError,
    OccursCheckError,
    SourceLocation,
    UnboundVariableError,
    UnificationError,
)

__all__ = [
    "ErrorCode",
    "InferenceError",
    "MalformedExpressionError",
    "OccursCheckError",
    "SourceLocation",
    "UnboundVariableError",
    "UnificationError",
]
