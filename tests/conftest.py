"""
Pytest configuration and shared fixtures for mlinfer tests.
"""

import json
from pathlib import Path

import pytest

from mlinfer.inference.ast_nodes import (
    BinaryExpression,
    BinaryOperator,
    CallExpression,
    ConditionalExpression,
    Expression,
    FunctionExpression,
    Identifier,
    IntegerLiteral,
    LetExpression,
)
from mlinfer.inference.environment import TypeEnvironment
from mlinfer.inference.types import TypeVariableSupply
from mlinfer.serialization import to_json


@pytest.fixture
def supply() -> TypeVariableSupply:
    """A fresh placeholder supply, starting at 'a'."""
    return TypeVariableSupply()


@pytest.fixture
def empty_env() -> TypeEnvironment:
    return TypeEnvironment.empty()


@pytest.fixture
def identity() -> Expression:
    """fun x -> x"""
    return FunctionExpression("x", Identifier("x"))


@pytest.fixture
def let_polymorphism(identity) -> Expression:
    """let id = fun x -> x in (id id) 5"""
    return LetExpression(
        "id",
        False,
        identity,
        CallExpression(
            CallExpression(Identifier("id"), Identifier("id")),
            IntegerLiteral(5),
        ),
    )


@pytest.fixture
def self_application() -> Expression:
    """let rec f = fun x -> f x in f"""
    return LetExpression(
        "f",
        True,
        FunctionExpression("x", CallExpression(Identifier("f"), Identifier("x"))),
        Identifier("f"),
    )


@pytest.fixture
def factorial() -> Expression:
    """let rec fact = fun n -> if n = 0 then 1 else n * fact (n - 1) in fact 5"""
    n = Identifier("n")
    return LetExpression(
        "fact",
        True,
        FunctionExpression(
            "n",
            ConditionalExpression(
                BinaryExpression(BinaryOperator.EQUAL, n, IntegerLiteral(0)),
                IntegerLiteral(1),
                BinaryExpression(
                    BinaryOperator.MULT,
                    n,
                    CallExpression(
                        Identifier("fact"),
                        BinaryExpression(BinaryOperator.SUB, n, IntegerLiteral(1)),
                    ),
                ),
            ),
        ),
        CallExpression(Identifier("fact"), IntegerLiteral(5)),
    )


@pytest.fixture
def program_file(tmp_path):
    """Factory fixture writing an expression tree (or raw text) to a JSON file."""

    def _write(program, name: str = "program.json") -> Path:
        path = tmp_path / name
        if isinstance(program, Expression):
            path.write_text(to_json(program), encoding="utf-8")
        elif isinstance(program, str):
            path.write_text(program, encoding="utf-8")
        else:
            path.write_text(json.dumps(program), encoding="utf-8")
        return path

    return _write
