"""
JSON value classification.

Every traversal step in the engine dispatches on a JsonKind rather than
probing Python types ad hoc, so the six JSON variants are handled in one place.
"""

from enum import Enum
from typing import Any, List


class JsonKind(Enum):
    """The closed set of JSON value variants."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(value: Any) -> JsonKind:
    """
    Classify a decoded JSON value.

    bool is checked before int because bool subclasses int in Python.

    Raises:
        TypeError: If the value is not one of the JSON variants
    """
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, list):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def children(value: Any) -> List[Any]:
    """
    Return the immediate children of a value in structural order.

    Array elements in index order, object values in key insertion order,
    nothing for scalars.
    """
    kind = kind_of(value)
    if kind is JsonKind.ARRAY:
        return list(value)
    if kind is JsonKind.OBJECT:
        return list(value.values())
    return []


def json_equal(left: Any, right: Any) -> bool:
    """
    Structural equality that never confuses booleans with numbers.

    Plain == would treat True == 1 and [True] == [1] as equal.
    """
    kind = kind_of(left)
    if kind is not kind_of(right):
        return False

    if kind is JsonKind.ARRAY:
        return len(left) == len(right) and all(
            json_equal(a, b) for a, b in zip(left, right)
        )
    if kind is JsonKind.OBJECT:
        return left.keys() == right.keys() and all(
            json_equal(left[key], right[key]) for key in left
        )
    return left == right
