"""
Result formatting for query matches.

Renders a list of matches either as a pretty-printed JSON array or as plain
text with one match per line.
"""

import json
import math
from typing import Any, Sequence

from ..query.values import JsonKind, kind_of


class ResultFormatter:
    """Formats query matches as JSON or plain text."""

    INDENT = 2

    def format(self, matches: Sequence[Any], as_json: bool) -> str:
        """
        Format matches into a single string.

        Args:
            matches: Matched values in discovery order
            as_json: True for an indented JSON array, False for plain text lines

        Returns:
            Formatted content; "[]" or "" when there are no matches
        """
        if as_json:
            return json.dumps(list(matches), indent=self.INDENT, ensure_ascii=False, default=str)
        return "\n".join(self.convert_match_to_string(match) for match in matches)

    @staticmethod
    def convert_match_to_string(match: Any) -> str:
        """
        Render a single match for plain text output.

        Strings are returned as-is, numbers as decimal text and everything
        else as compact JSON.
        """
        try:
            kind = kind_of(match)
        except TypeError:
            return str(match)

        if kind is JsonKind.STRING:
            return match
        if kind is JsonKind.NUMBER:
            return number_to_string(match)
        return json.dumps(match, separators=(",", ":"), ensure_ascii=False, default=str)


def number_to_string(number: Any) -> str:
    """
    Canonical decimal text for a JSON number.

    Integral floats print without a fractional part (3.0 -> "3"), matching
    how the number was most likely written in the document.

    Examples:
        42 -> "42"
        3.0 -> "3"
        0.5 -> "0.5"
        1e+21 -> "1e+21"
        nan -> "NaN"
    """
    if isinstance(number, float):
        if not math.isfinite(number):
            return json.dumps(number)
        if number.is_integer() and abs(number) < 1e21:
            return str(int(number))
        return repr(number)
    return str(number)


_default_formatter = ResultFormatter()


def format_matches(matches: Sequence[Any], as_json: bool) -> str:
    """Format matches with a shared ResultFormatter; see ResultFormatter.format."""
    return _default_formatter.format(matches, as_json)
