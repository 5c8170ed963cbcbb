"""
mlinfer - Hindley-Milner type inference for a small functional language.

Infers the type of an already-parsed expression without type annotations:
every node gets a placeholder, equality constraints are collected from the
shape of each expression, and unification solves them into concrete or
polymorphic types.
"""

from mlinfer.inference import (
    InferenceConfig,
    InferenceResult,
    TypeInferrer,
    infer,
    infer_annotated,
)
from mlinfer.utils.errors import (
    InferenceError,
    OccursCheckError,
    UnboundVariableError,
    UnificationError,
)

__version__ = "0.1.0"
__all__ = [
    "infer",
    "infer_annotated",
    "InferenceConfig",
    "InferenceResult",
    "TypeInferrer",
    "InferenceError",
    "UnboundVariableError",
    "OccursCheckError",
    "UnificationError",
]
