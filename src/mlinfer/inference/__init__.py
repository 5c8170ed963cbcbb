"""
mlinfer Inference Package.

This package contains the type inference components:
- AST: Node definitions for the expression tree
- Types: Type schemes, substitutions and fresh placeholder names
- Environment: Immutable typing environment
- Generalization: Let-polymorphism (generalize / instantiate)
- Unification: Constraint solving with occurs check
- Constraints: Constraint generation over the expression tree
- Inferencer: The driver tying generation and unification together
"""

from mlinfer.inference.annotated import TypedExpression
from mlinfer.inference.ast_nodes import (
    BinaryExpression,
    BinaryOperator,
    BooleanLiteral,
    CallExpression,
    ConditionalExpression,
    Expression,
    ExpressionVisitor,
    FunctionExpression,
    Identifier,
    IntegerLiteral,
    LetExpression,
    NotExpression,
    OperatorCategory,
    StringLiteral,
)
from mlinfer.inference.constraints import ConstraintGenerator, GenerationResult, generate
from mlinfer.inference.environment import TypeEnvironment
from mlinfer.inference.generalization import (
    alpha_equivalent,
    free_type_variables,
    free_type_variables_in_environment,
    generalize,
    instantiate,
    normalize,
)
from mlinfer.inference.inferencer import (
    InferenceConfig,
    InferenceResult,
    TypeInferrer,
    infer,
    infer_annotated,
    raised_recursion_limit,
)
from mlinfer.inference.types import (
    BOOLEAN_TYPE,
    NUMERIC_TYPE,
    STRING_TYPE,
    FunctionType,
    PolymorphicType,
    PrimitiveType,
    Substitution,
    Type,
    TypeVariable,
    TypeVariableSupply,
    substitute,
)
from mlinfer.inference.unification import (
    Constraint,
    occurs_check,
    unify,
    unify_constraints,
    unify_substitutions,
)

__all__ = [
    # AST
    "Expression",
    "ExpressionVisitor",
    "IntegerLiteral",
    "BooleanLiteral",
    "StringLiteral",
    "Identifier",
    "FunctionExpression",
    "NotExpression",
    "BinaryExpression",
    "BinaryOperator",
    "OperatorCategory",
    "ConditionalExpression",
    "CallExpression",
    "LetExpression",
    "TypedExpression",
    # Types
    "Type",
    "PrimitiveType",
    "TypeVariable",
    "FunctionType",
    "PolymorphicType",
    "NUMERIC_TYPE",
    "BOOLEAN_TYPE",
    "STRING_TYPE",
    "Substitution",
    "TypeVariableSupply",
    "substitute",
    # Environment and polymorphism
    "TypeEnvironment",
    "free_type_variables",
    "free_type_variables_in_environment",
    "generalize",
    "instantiate",
    "normalize",
    "alpha_equivalent",
    # Unification
    "Constraint",
    "occurs_check",
    "unify",
    "unify_constraints",
    "unify_substitutions",
    # Generation and driver
    "ConstraintGenerator",
    "GenerationResult",
    "generate",
    "InferenceConfig",
    "InferenceResult",
    "TypeInferrer",
    "infer",
    "infer_annotated",
    "raised_recursion_limit",
]
