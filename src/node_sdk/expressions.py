"""
Page Predicates - Side-effect free expressions evaluated against a dict.

Used for stop conditions such as::

    response_metadata.next_cursor == "" or len(messages) < 10
    page["has_more"] is False

Bare names read top-level keys of the evaluated dict; ``page`` is the whole
dict. ``true``, ``false`` and ``null`` are accepted as literals. Attribute
access on a dict reads a key. Missing keys evaluate to None.

Expressions are validated when compiled: only literals, lookups, boolean
logic, comparisons, arithmetic and a handful of pure functions are allowed.
"""

from __future__ import annotations

import ast
import operator
from typing import Any, Callable, Dict, Optional


Predicate = Callable[[Dict[str, Any]], bool]


class ExpressionError(Exception):
    """Expression compilation or evaluation error."""

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message)
        self.expression = expression


_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_COMPARISONS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
    ast.In: lambda x, y: x in y,
    ast.NotIn: lambda x, y: x not in y,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "len": len,
    "bool": bool,
    "str": str,
    "int": int,
    "float": float,
}

_LITERAL_NAMES = {"true": True, "false": False, "null": None}

_ALLOWED_NODES = (
    ast.Expression, ast.BoolOp, ast.And, ast.Or, ast.UnaryOp, ast.BinOp,
    ast.Compare, ast.IfExp, ast.Constant, ast.Name, ast.Load, ast.Attribute,
    ast.Subscript, ast.Call, ast.List, ast.Tuple,
    *_BINARY_OPERATORS, *_COMPARISONS, *_UNARY_OPERATORS,
)


class PagePredicate:
    """A compiled predicate over a page dict."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as e:
            raise ExpressionError(f"Syntax error in expression: {e.msg}", expression) from e
        self._validate(tree)
        self._tree = tree

    def __call__(self, page: Dict[str, Any]) -> bool:
        try:
            return bool(self._eval(self._tree.body, page))
        except ExpressionError:
            raise
        except Exception as e:
            raise ExpressionError(f"Expression evaluation failed: {e}", self.expression) from e

    def __repr__(self) -> str:
        return f"PagePredicate({self.expression!r})"

    def _validate(self, tree: ast.AST) -> None:
        for node in ast.walk(tree):
            if not isinstance(node, _ALLOWED_NODES):
                raise ExpressionError(
                    f"Unsupported syntax in expression: {type(node).__name__}",
                    self.expression,
                )
            if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
                raise ExpressionError(f"Private attribute access: {node.attr}", self.expression)
            if isinstance(node, ast.Call):
                if not isinstance(node.func, ast.Name) or node.func.id not in _FUNCTIONS:
                    raise ExpressionError("Only len, bool, str, int and float can be called", self.expression)
                if node.keywords:
                    raise ExpressionError("Keyword arguments are not supported", self.expression)

    def _eval(self, node: ast.AST, page: Dict[str, Any]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value

        if isinstance(node, ast.Name):
            if node.id == "page":
                return page
            if node.id in _LITERAL_NAMES:
                return _LITERAL_NAMES[node.id]
            return _lookup(page, node.id)

        if isinstance(node, ast.Attribute):
            return _lookup(self._eval(node.value, page), node.attr)

        if isinstance(node, ast.Subscript):
            return _lookup(self._eval(node.value, page), self._eval(node.slice, page))

        if isinstance(node, ast.BoolOp):
            result: Any = None
            for value in node.values:
                result = self._eval(value, page)
                if isinstance(node.op, ast.And) and not result:
                    return result
                if isinstance(node.op, ast.Or) and result:
                    return result
            return result

        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPERATORS[type(node.op)](self._eval(node.operand, page))

        if isinstance(node, ast.BinOp):
            return _BINARY_OPERATORS[type(node.op)](
                self._eval(node.left, page),
                self._eval(node.right, page),
            )

        if isinstance(node, ast.Compare):
            left = self._eval(node.left, page)
            for op, comparator in zip(node.ops, node.comparators):
                right = self._eval(comparator, page)
                if not _COMPARISONS[type(op)](left, right):
                    return False
                left = right
            return True

        if isinstance(node, ast.IfExp):
            if self._eval(node.test, page):
                return self._eval(node.body, page)
            return self._eval(node.orelse, page)

        if isinstance(node, ast.Call):
            args = [self._eval(arg, page) for arg in node.args]
            return _FUNCTIONS[node.func.id](*args)

        if isinstance(node, ast.List):
            return [self._eval(element, page) for element in node.elts]

        if isinstance(node, ast.Tuple):
            return tuple(self._eval(element, page) for element in node.elts)

        raise ExpressionError(f"Unsupported syntax in expression: {type(node).__name__}", self.expression)


def _lookup(container: Any, key: Any) -> Any:
    if isinstance(container, dict):
        return container.get(key)
    if isinstance(container, (list, tuple)) and isinstance(key, int) and not isinstance(key, bool):
        if -len(container) <= key < len(container):
            return container[key]
    return None


def never_stop(page: Dict[str, Any]) -> bool:
    return False


def compile_predicate(expression: Optional[str]) -> Predicate:
    """
    Compile a stop expression.

    An empty expression yields a predicate that never stops.

    Raises:
        ExpressionError: If the expression uses unsupported syntax
    """
    if expression is None or not str(expression).strip():
        return never_stop
    return PagePredicate(str(expression))


__all__ = [
    "ExpressionError",
    "PagePredicate",
    "Predicate",
    "compile_predicate",
    "never_stop",
]
