"""
Filter predicate evaluation for [?(...)] selectors.

Supports comparison operators, logical operators, existence tests and
references to the current node (@) or the document root ($).

Predicates evaluate to a three-valued Truth. Comparing values of different
JSON kinds, ordering anything but numbers and strings, or referencing a
missing field yields MISMATCH instead of raising. A node is kept by a filter
only when its predicate is TRUE.
"""

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Tuple, Union

from .values import JsonKind, json_equal, kind_of


class Truth(Enum):
    """Outcome of a predicate: TRUE, FALSE or a type MISMATCH."""

    TRUE = "true"
    FALSE = "false"
    MISMATCH = "mismatch"

    @classmethod
    def of(cls, flag: bool) -> "Truth":
        return cls.TRUE if flag else cls.FALSE


class _Nothing:
    """Result of resolving a node path that does not exist."""

    def __repr__(self) -> str:
        return "NOTHING"


NOTHING = _Nothing()

_ORDERING: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class Literal:
    """A literal number, string, boolean or null in a filter."""

    value: Any

    def resolve(self, current: Any, root: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class NodePath:
    """
    A singular path relative to the current node (@) or the root ($).

    Steps are object keys (str) or array indices (int).
    """

    anchor: str
    steps: Tuple[Union[str, int], ...] = ()

    def resolve(self, current: Any, root: Any) -> Any:
        value = current if self.anchor == "@" else root
        for step in self.steps:
            kind = kind_of(value)
            if isinstance(step, int):
                if kind is not JsonKind.ARRAY or not -len(value) <= step < len(value):
                    return NOTHING
            elif kind is not JsonKind.OBJECT or step not in value:
                return NOTHING
            value = value[step]
        return value


Operand = Union[Literal, NodePath]


class Predicate:
    """Base class for filter expression nodes."""

    def test(self, current: Any, root: Any) -> Truth:
        raise NotImplementedError

    def matches(self, current: Any, root: Any) -> bool:
        return self.test(current, root) is Truth.TRUE


@dataclass(frozen=True)
class Exists(Predicate):
    """True when the path resolves to a value (including null)."""

    path: NodePath

    def test(self, current: Any, root: Any) -> Truth:
        return Truth.of(self.path.resolve(current, root) is not NOTHING)


@dataclass(frozen=True)
class Comparison(Predicate):
    """Binary comparison between two operands."""

    op: str
    left: Operand
    right: Operand

    def test(self, current: Any, root: Any) -> Truth:
        left_val = self.left.resolve(current, root)
        right_val = self.right.resolve(current, root)
        if left_val is NOTHING or right_val is NOTHING:
            return Truth.MISMATCH

        kind = kind_of(left_val)
        if kind is not kind_of(right_val):
            return Truth.MISMATCH

        if self.op == "==":
            return Truth.of(json_equal(left_val, right_val))
        if self.op == "!=":
            return Truth.of(not json_equal(left_val, right_val))

        if kind not in (JsonKind.NUMBER, JsonKind.STRING):
            return Truth.MISMATCH
        return Truth.of(_ORDERING[self.op](left_val, right_val))


@dataclass(frozen=True)
class Not(Predicate):
    operand: Predicate

    def test(self, current: Any, root: Any) -> Truth:
        result = self.operand.test(current, root)
        if result is Truth.MISMATCH:
            return result
        return Truth.of(result is Truth.FALSE)


@dataclass(frozen=True)
class And(Predicate):
    left: Predicate
    right: Predicate

    def test(self, current: Any, root: Any) -> Truth:
        left_result = self.left.test(current, root)
        if left_result is Truth.FALSE:
            return left_result
        right_result = self.right.test(current, root)
        if right_result is Truth.FALSE:
            return right_result
        if left_result is Truth.TRUE and right_result is Truth.TRUE:
            return Truth.TRUE
        return Truth.MISMATCH


@dataclass(frozen=True)
class Or(Predicate):
    left: Predicate
    right: Predicate

    def test(self, current: Any, root: Any) -> Truth:
        left_result = self.left.test(current, root)
        if left_result is Truth.TRUE:
            return left_result
        right_result = self.right.test(current, root)
        if right_result is Truth.TRUE:
            return right_result
        if left_result is Truth.FALSE and right_result is Truth.FALSE:
            return Truth.FALSE
        return Truth.MISMATCH
