"""JSON encoding of expression trees and annotated trees.

The command line reads programs in this form, since parsing source text is
left to the front end that produces the tree. Each node is an object whose
``"node"`` key names its kind::

    {"node": "let", "name": "id", "recursive": false,
     "value": {"node": "fun", "parameter": "x",
               "body": {"node": "id", "name": "x"}},
     "body": {"node": "call", "callee": {"node": "id", "name": "id"},
              "argument": {"node": "int", "value": 5}}}

An optional ``"location": [line, column]`` is attached to the node.
"""

from __future__ import annotations

import json
from collections import OrderedDict
from typing import Any, Callable, Mapping, Optional

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
from mlinfer.utils.errors import MalformedExpressionError, SourceLocation

OPERATOR_NAMES: dict[str, BinaryOperator] = {
    "add": BinaryOperator.ADD,
    "sub": BinaryOperator.SUB,
    "mult": BinaryOperator.MULT,
    "div": BinaryOperator.DIV,
    "concat": BinaryOperator.CONCAT,
    "greater": BinaryOperator.GREATER,
    "less": BinaryOperator.LESS,
    "greater_equal": BinaryOperator.GREATER_EQUAL,
    "less_equal": BinaryOperator.LESS_EQUAL,
    "equal": BinaryOperator.EQUAL,
    "not_equal": BinaryOperator.NOT_EQUAL,
    "and": BinaryOperator.AND,
    "or": BinaryOperator.OR,
}

_OPERATOR_KEYS = {operator: name for name, operator in OPERATOR_NAMES.items()}


def to_json(node: Expression | TypedExpression, *, indent: int | None = 2) -> str:
    """Serialize an expression, or an annotated tree with its types, into JSON."""
    if isinstance(node, TypedExpression):
        payload = typed_to_dict(node)
    else:
        payload = _Encoder().visit(node)
    return json.dumps(payload, indent=indent)


def from_json(payload: str, filename: str | None = None) -> Expression:
    """Deserialize JSON text into an expression tree."""
    try:
        raw = json.loads(payload)
        return from_dict(raw, filename)
    except json.JSONDecodeError as exc:
        location = SourceLocation(exc.lineno, exc.colno, exc.pos, filename)
        raise MalformedExpressionError(f"invalid JSON: {exc.msg}", location) from exc
    except RecursionError as exc:
        source = f" in {filename}" if filename else ""
        raise MalformedExpressionError(
            f"expression tree{source} is nested deeper than the recursion limit allows"
        ) from exc


def from_dict(data: Any, filename: str | None = None) -> Expression:
    """Build an expression tree from decoded JSON data."""
    if not isinstance(data, Mapping):
        raise MalformedExpressionError(f"expected a node object, got {type(data).__name__}")
    kind = data.get("node")
    decoder = _DECODERS.get(kind) if isinstance(kind, str) else None
    if decoder is None:
        raise MalformedExpressionError(f"unknown node kind {kind!r}")
    location = _location(data, filename)
    try:
        return decoder(data, location, filename)
    except KeyError as exc:
        raise MalformedExpressionError(
            f"'{kind}' node is missing field {exc.args[0]!r}", location
        ) from None


def typed_to_dict(typed: TypedExpression) -> OrderedDict[str, Any]:
    """Encode an annotated tree; each node gains a ``"type"`` entry."""
    data = _Encoder(shallow=True).visit(typed.expression)
    data["type"] = str(typed.type_)
    for key, child in zip(_child_keys(typed.expression), typed.children):
        data[key] = typed_to_dict(child)
    return data


# ---------------------------------------------------------------------------
# Decoding helpers


def _location(data: Mapping[str, Any], filename: str | None) -> SourceLocation | None:
    raw = data.get("location")
    if raw is None:
        return None
    if (
        not isinstance(raw, (list, tuple))
        or len(raw) != 2
        or not all(isinstance(part, int) for part in raw)
    ):
        raise MalformedExpressionError(f"location must be [line, column], got {raw!r}")
    return SourceLocation(raw[0], raw[1], filename=filename)


_MISSING = object()


def _expect(
    data: Mapping[str, Any],
    key: str,
    kind: type,
    location: SourceLocation | None,
    default: Any = _MISSING,
) -> Any:
    if key not in data and default is not _MISSING:
        return default
    value = data[key]
    # bool is an int subclass; keep the two apart.
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MalformedExpressionError(
            f"field {key!r} of '{data['node']}' must be {kind.__name__}", location
        )
    return value


def _decode_binary(data, location, filename) -> Expression:
    name = data["operator"]
    if name not in OPERATOR_NAMES:
        raise MalformedExpressionError(f"unknown operator {name!r}", location)
    return BinaryExpression(
        OPERATOR_NAMES[name],
        from_dict(data["left"], filename),
        from_dict(data["right"], filename),
        location,
    )


_Decoder = Callable[[Mapping[str, Any], Optional[SourceLocation], Optional[str]], Expression]

_DECODERS: dict[str, _Decoder] = {
    "int": lambda d, loc, fn: IntegerLiteral(_expect(d, "value", int, loc), loc),
    "bool": lambda d, loc, fn: BooleanLiteral(_expect(d, "value", bool, loc), loc),
    "string": lambda d, loc, fn: StringLiteral(_expect(d, "value", str, loc), loc),
    "id": lambda d, loc, fn: Identifier(_expect(d, "name", str, loc), loc),
    "fun": lambda d, loc, fn: FunctionExpression(
        _expect(d, "parameter", str, loc), from_dict(d["body"], fn), loc
    ),
    "not": lambda d, loc, fn: NotExpression(from_dict(d["operand"], fn), loc),
    "binop": _decode_binary,
    "if": lambda d, loc, fn: ConditionalExpression(
        from_dict(d["condition"], fn),
        from_dict(d["then"], fn),
        from_dict(d["else"], fn),
        loc,
    ),
    "call": lambda d, loc, fn: CallExpression(
        from_dict(d["callee"], fn), from_dict(d["argument"], fn), loc
    ),
    "let": lambda d, loc, fn: LetExpression(
        _expect(d, "name", str, loc),
        _expect(d, "recursive", bool, loc, default=False),
        from_dict(d["value"], fn),
        from_dict(d["body"], fn),
        loc,
    ),
}


# ---------------------------------------------------------------------------
# Encoding helpers


def _child_keys(expression: Expression) -> tuple[str, ...]:
    if isinstance(expression, FunctionExpression):
        return ("body",)
    if isinstance(expression, NotExpression):
        return ("operand",)
    if isinstance(expression, BinaryExpression):
        return ("left", "right")
    if isinstance(expression, ConditionalExpression):
        return ("condition", "then", "else")
    if isinstance(expression, CallExpression):
        return ("callee", "argument")
    if isinstance(expression, LetExpression):
        return ("value", "body")
    return ()


class _Encoder(ExpressionVisitor):
    """Encodes nodes; a shallow encoder leaves children out."""

    def __init__(self, shallow: bool = False) -> None:
        self.shallow = shallow

    def _node(self, kind: str, node: Expression, **fields: Any) -> OrderedDict[str, Any]:
        data: OrderedDict[str, Any] = OrderedDict(node=kind)
        if node.location is not None:
            data["location"] = [node.location.line, node.location.column]
        data.update(fields)
        if not self.shallow:
            for key, child in zip(_child_keys(node), node.children()):
                data[key] = self.visit(child)
        return data

    def visit_integer_literal(self, node: IntegerLiteral) -> Any:
        return self._node("int", node, value=node.value)

    def visit_boolean_literal(self, node: BooleanLiteral) -> Any:
        return self._node("bool", node, value=node.value)

    def visit_string_literal(self, node: StringLiteral) -> Any:
        return self._node("string", node, value=node.value)

    def visit_identifier(self, node: Identifier) -> Any:
        return self._node("id", node, name=node.name)

    def visit_function(self, node: FunctionExpression) -> Any:
        return self._node("fun", node, parameter=node.parameter)

    def visit_not(self, node: NotExpression) -> Any:
        return self._node("not", node)

    def visit_binary_expression(self, node: BinaryExpression) -> Any:
        return self._node("binop", node, operator=_OPERATOR_KEYS[node.operator])

    def visit_conditional(self, node: ConditionalExpression) -> Any:
        return self._node("if", node)

    def visit_call(self, node: CallExpression) -> Any:
        return self._node("call", node)

    def visit_let(self, node: LetExpression) -> Any:
        return self._node("let", node, name=node.name, recursive=node.is_recursive)
