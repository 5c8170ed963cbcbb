"""
Textual rendering of expressions and annotated trees.

``format_expression`` prints an expression in ML-like concrete syntax;
``format_typed_tree`` prints one line per node with its type, indented by
depth, for inspecting the result of ``infer_annotated``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

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
    StringLiteral,
)

# =============================================================================
# Formatter Configuration
# =============================================================================


@dataclass
class FormatConfig:
    """Configuration for the formatter."""

    indent_size: int = 2
    # Expressions longer than this are shortened in tree listings.
    max_label_length: int = 60


# =============================================================================
# Binary Operator Mapping
# =============================================================================


BINARY_OP_SYMBOLS: dict[BinaryOperator, str] = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MULT: "*",
    BinaryOperator.DIV: "/",
    BinaryOperator.CONCAT: "^",
    BinaryOperator.GREATER: ">",
    BinaryOperator.LESS: "<",
    BinaryOperator.GREATER_EQUAL: ">=",
    BinaryOperator.LESS_EQUAL: "<=",
    BinaryOperator.EQUAL: "=",
    BinaryOperator.NOT_EQUAL: "<>",
    BinaryOperator.AND: "&&",
    BinaryOperator.OR: "||",
}


# =============================================================================
# Expression Formatter
# =============================================================================


class ExpressionFormatter(ExpressionVisitor):
    """Renders expressions as ML-like source text."""

    def visit_integer_literal(self, node: IntegerLiteral) -> str:
        return str(node.value)

    def visit_boolean_literal(self, node: BooleanLiteral) -> str:
        return "true" if node.value else "false"

    def visit_string_literal(self, node: StringLiteral) -> str:
        return json.dumps(node.value)

    def visit_identifier(self, node: Identifier) -> str:
        return node.name

    def visit_function(self, node: FunctionExpression) -> str:
        return f"fun {node.parameter} -> {self.visit(node.body)}"

    def visit_not(self, node: NotExpression) -> str:
        return f"not {self._atom(node.operand)}"

    def visit_binary_expression(self, node: BinaryExpression) -> str:
        symbol = BINARY_OP_SYMBOLS[node.operator]
        return f"{self._atom(node.left)} {symbol} {self._atom(node.right)}"

    def visit_conditional(self, node: ConditionalExpression) -> str:
        return (
            f"if {self.visit(node.condition)} then {self.visit(node.then_expr)} "
            f"else {self.visit(node.else_expr)}"
        )

    def visit_call(self, node: CallExpression) -> str:
        callee = self.visit(node.callee)
        if not isinstance(node.callee, (Identifier, CallExpression)):
            callee = f"({callee})"
        return f"{callee} {self._atom(node.argument)}"

    def visit_let(self, node: LetExpression) -> str:
        keyword = "let rec" if node.is_recursive else "let"
        return f"{keyword} {node.name} = {self.visit(node.value)} in {self.visit(node.body)}"

    def _atom(self, node: Expression) -> str:
        text = self.visit(node)
        if isinstance(node, (IntegerLiteral, BooleanLiteral, StringLiteral, Identifier)):
            return text
        return f"({text})"


def format_expression(expression: Expression) -> str:
    """Render ``expression`` as source text."""
    return ExpressionFormatter().visit(expression)


def format_typed_tree(typed: TypedExpression, config: FormatConfig | None = None) -> str:
    """
    Render an annotated tree, one node per line.

    Example:
        let id = fun x -> x in id 5 : Int
          fun x -> x : 'b -> 'b
            x : 'b
          id 5 : Int
            ...
    """
    config = config or FormatConfig()
    formatter = ExpressionFormatter()
    lines = []

    def render(node: TypedExpression, depth: int) -> None:
        label = formatter.visit(node.expression)
        if len(label) > config.max_label_length:
            label = label[: config.max_label_length - 3] + "..."
        lines.append(f"{' ' * (config.indent_size * depth)}{label} : {node.type_}")
        for child in node.children:
            render(child, depth + 1)

    render(typed, 0)
    return "\n".join(lines)
