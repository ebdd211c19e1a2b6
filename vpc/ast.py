from dataclasses import dataclass, field
from typing import List, Any


# Operators a BinaryOp may carry
ARITH_OPS = ('+', '-', '*', '/')
COMPARE_OPS = ('==',)
BINARY_OPS = ARITH_OPS + COMPARE_OPS


@dataclass
class Assignment:
    variable: str
    value: Any


@dataclass
class BinaryOp:
    left: Any
    operator: str  # One of BINARY_OPS
    right: Any


@dataclass
class Number:
    value: float  # Parsed from literal text; narrowed to int64 at code generation


@dataclass
class Variable:
    name: str


@dataclass
class Print:
    expression: Any


@dataclass
class If:
    condition: Any
    then_branch: List[Any] = field(default_factory=list)
    else_branch: List[Any] = field(default_factory=list)  # Empty when there is no else


def collect_variables(program: List[Any]) -> List[str]:
    """Names that need a storage slot, in first-occurrence order, without duplicates.

    Walks the program depth-first, recording each assignment target and
    descending into binary operands and both branches of an if. Nodes that
    carry no variable definition are skipped.
    """
    names: List[str] = []

    def visit(node):
        if isinstance(node, Assignment):
            if node.variable not in names:
                names.append(node.variable)
        elif isinstance(node, BinaryOp):
            visit(node.left)
            visit(node.right)
        elif isinstance(node, If):
            visit(node.condition)
            for stmt in node.then_branch:
                visit(stmt)
            for stmt in node.else_branch:
                visit(stmt)

    for node in program:
        visit(node)
    return names


def iter_expressions(node):
    """Yield every expression node under ``node`` (statements excluded)."""
    if isinstance(node, Assignment):
        yield from iter_expressions(node.value)
    elif isinstance(node, Print):
        yield from iter_expressions(node.expression)
    elif isinstance(node, If):
        yield from iter_expressions(node.condition)
        for stmt in node.then_branch + node.else_branch:
            yield from iter_expressions(stmt)
    elif isinstance(node, BinaryOp):
        yield node
        yield from iter_expressions(node.left)
        yield from iter_expressions(node.right)
    elif isinstance(node, (Number, Variable)):
        yield node
