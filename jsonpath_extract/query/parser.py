"""
JSONPath query parsing.

Compiles query strings such as "$.store.book[0]", "$..name",
"$.items[1:-1:2]" or "$.items[?(@.price < 10 && @.tags)]" into a
PathExpression. Any syntax problem raises InvalidQueryError.
"""

import re
from typing import Any, Callable, List, Optional, Union

from .filters import (
    And,
    Comparison,
    Exists,
    Literal,
    NodePath,
    Not,
    Operand,
    Or,
    Predicate,
)
from .segments import (
    DescendantWildcardSegment,
    FieldSegment,
    FilterSegment,
    IndexSegment,
    PathExpression,
    RecursiveDescentSegment,
    Segment,
    SliceSegment,
    WildcardSegment,
)


class InvalidQueryError(ValueError):
    """Raised when a query string does not follow the JSONPath grammar."""

    def __init__(self, reason: str, query: str, position: int):
        super().__init__(f"{reason} (at position {position} in {query!r})")
        self.reason = reason
        self.query = query
        self.position = position


class QueryParser:
    """Recursive descent parser for JSONPath queries."""

    # Member names after '.' and inside filter paths
    NAME_PATTERN = re.compile(r"""[^\s.\[\]()'"*?,:=!<>&|]+""")

    # Unquoted member names inside brackets; must not look like a number
    BRACKET_NAME_PATTERN = re.compile(r"""[^\s.\[\]()'"*?,:=!<>&|0-9\-][^\s.\[\]()'"*?,:=!<>&|]*""")

    INTEGER_PATTERN = re.compile(r"-?[0-9]+")
    NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
    KEYWORD_PATTERN = re.compile(r"(true|false|null)(?![\w])")
    COMPARISON_PATTERN = re.compile(r"==|!=|<=|>=|<|>")

    # Characters that may not directly follow a numeric literal
    NUMBER_TAIL_PATTERN = re.compile(r"[\w.]")

    # Parentheses and negations nested deeper than this are rejected
    MAX_FILTER_NESTING = 100

    KEYWORDS = {"true": True, "false": False, "null": None}

    ESCAPES = {
        '"': '"',
        "'": "'",
        "\\": "\\",
        "/": "/",
        "b": "\b",
        "f": "\f",
        "n": "\n",
        "r": "\r",
        "t": "\t",
    }

    def __init__(self, query: str):
        self.text = query.strip()
        self.pos = 0
        self.nesting = 0

    def parse(self) -> PathExpression:
        """
        Parse the whole query.

        Returns:
            Compiled PathExpression

        Raises:
            InvalidQueryError: If the query is empty or malformed
        """
        if not self.text:
            raise self._error("Query is empty")
        if not self._consume("$"):
            raise self._error("Query must start with '$'")

        segments: List[Segment] = []
        while not self._at_end():
            segments.extend(self._parse_segment())

        return PathExpression(self.text, tuple(segments))

    # ------------------------------------------------------------------
    # Path segments
    # ------------------------------------------------------------------

    def _parse_segment(self) -> List[Segment]:
        if self._consume(".."):
            return self._parse_descendant_selector()
        if self._consume("."):
            return [self._parse_dot_selector()]
        if self._peek() == "[":
            return [self._parse_bracket()]
        raise self._error(f"Unexpected character {self._peek()!r}")

    def _parse_dot_selector(self) -> Segment:
        if self._consume("*"):
            return WildcardSegment()
        name = self._match(self.NAME_PATTERN)
        if name is None:
            raise self._error("Empty segment after '.'")
        return FieldSegment(name)

    def _parse_descendant_selector(self) -> List[Segment]:
        if self._peek() == "[":
            selector = self._parse_bracket()
        elif self._consume("*"):
            selector = WildcardSegment()
        else:
            name = self._match(self.NAME_PATTERN)
            if name is None:
                raise self._error("Empty segment after '..'")
            selector = FieldSegment(name)

        if isinstance(selector, WildcardSegment):
            return [DescendantWildcardSegment()]
        return [RecursiveDescentSegment(), selector]

    def _parse_bracket(self) -> Segment:
        self._expect("[")
        self._skip_whitespace()
        char = self._peek()

        segment: Segment
        if char == "*":
            self.pos += 1
            segment = WildcardSegment()
        elif char in ("'", '"'):
            segment = FieldSegment(self._read_string())
        elif char == "?":
            self.pos += 1
            segment = FilterSegment(self._parse_filter())
        elif char == ":" or char == "-" or char.isdigit():
            segment = self._parse_index_or_slice()
        elif char == "]":
            raise self._error("Empty brackets")
        elif char == "":
            raise self._error("Unbalanced '['")
        else:
            name = self._match(self.BRACKET_NAME_PATTERN)
            if name is None:
                raise self._error(f"Unexpected character {char!r} in brackets")
            segment = FieldSegment(name)

        self._skip_whitespace()
        self._expect("]")
        return segment

    def _parse_index_or_slice(self) -> Segment:
        start = self._read_optional_integer()
        self._skip_whitespace()
        if not self._consume(":"):
            if start is None:
                raise self._error("Expected index")
            return IndexSegment(start)

        self._skip_whitespace()
        end = self._read_optional_integer()
        self._skip_whitespace()

        step = None
        if self._consume(":"):
            self._skip_whitespace()
            position = self.pos
            step = self._read_optional_integer()
            if step == 0:
                raise InvalidQueryError("Slice step cannot be zero", self.text, position)

        return SliceSegment(start, end, step)

    def _read_optional_integer(self) -> Optional[int]:
        char = self._peek()
        if char != "-" and not char.isdigit():
            return None
        return self._read_integer()

    def _read_integer(self) -> int:
        start = self.pos
        digits = self._match(self.INTEGER_PATTERN)
        if digits is None:
            raise self._error("Malformed numeric literal")
        self._check_number_tail()
        return self._convert_number(int, digits, start)

    # ------------------------------------------------------------------
    # Filter expressions
    # ------------------------------------------------------------------

    def _parse_filter(self) -> Predicate:
        self._skip_whitespace()
        if self._at_end():
            raise self._error("Empty filter expression")
        return self._parse_or()

    def _parse_or(self) -> Predicate:
        left = self._parse_and()
        while True:
            self._skip_whitespace()
            if not self._consume("||"):
                return left
            left = Or(left, self._parse_and())

    def _parse_and(self) -> Predicate:
        left = self._parse_unary()
        while True:
            self._skip_whitespace()
            if not self._consume("&&"):
                return left
            left = And(left, self._parse_unary())

    def _parse_unary(self) -> Predicate:
        self._skip_whitespace()
        if self._peek() == "!" and not self.text.startswith("!=", self.pos):
            self._enter_nesting()
            self.pos += 1
            predicate: Predicate = Not(self._parse_unary())
            self.nesting -= 1
            return predicate

        if self._peek() == "(":
            self._enter_nesting()
            self.pos += 1
            self._skip_whitespace()
            if self._peek() == ")":
                raise self._error("Empty parentheses")
            predicate = self._parse_or()
            self._skip_whitespace()
            if not self._consume(")"):
                raise self._error("Unbalanced '('")
            self.nesting -= 1
            return predicate

        return self._parse_comparison()

    def _enter_nesting(self) -> None:
        if self.nesting >= self.MAX_FILTER_NESTING:
            raise self._error("Filter expression is nested too deeply")
        self.nesting += 1

    def _parse_comparison(self) -> Predicate:
        left = self._parse_operand()
        self._skip_whitespace()
        op = self._match(self.COMPARISON_PATTERN)
        if op is not None:
            right = self._parse_operand()
            return Comparison(op, left, right)

        if isinstance(left, NodePath):
            return Exists(left)
        raise self._error("Expected comparison operator after literal")

    def _parse_operand(self) -> Operand:
        self._skip_whitespace()
        char = self._peek()

        if char in ("@", "$"):
            return self._parse_node_path()
        if char in ("'", '"'):
            return Literal(self._read_string())
        if char == "-" or char.isdigit():
            return Literal(self._read_number())

        keyword = self._match(self.KEYWORD_PATTERN)
        if keyword is not None:
            return Literal(self.KEYWORDS[keyword])

        if char == "":
            raise self._error("Unexpected end of filter expression")
        raise self._error(f"Expected operand, found {char!r}")

    def _parse_node_path(self) -> NodePath:
        anchor = self.text[self.pos]
        self.pos += 1

        steps: List[Union[str, int]] = []
        while True:
            if self._consume("."):
                name = self._match(self.NAME_PATTERN)
                if name is None:
                    raise self._error("Empty segment in filter path")
                steps.append(name)
            elif self._consume("["):
                self._skip_whitespace()
                char = self._peek()
                if char in ("'", '"'):
                    steps.append(self._read_string())
                elif char == "-" or char.isdigit():
                    steps.append(self._read_integer())
                else:
                    raise self._error("Filter paths support only names and indices in brackets")
                self._skip_whitespace()
                self._expect("]")
            else:
                return NodePath(anchor, tuple(steps))

    def _read_number(self) -> Union[int, float]:
        start = self.pos
        literal = self._match(self.NUMBER_PATTERN)
        if literal is None:
            raise self._error("Malformed numeric literal")
        self._check_number_tail()
        if any(c in literal for c in ".eE"):
            return self._convert_number(float, literal, start)
        return self._convert_number(int, literal, start)

    def _convert_number(self, convert: Callable[[str], Any], literal: str, start: int) -> Any:
        try:
            return convert(literal)
        except ValueError:
            raise InvalidQueryError("Malformed numeric literal", self.text, start) from None

    # ------------------------------------------------------------------
    # Scanning helpers
    # ------------------------------------------------------------------

    def _read_string(self) -> str:
        quote = self.text[self.pos]
        start = self.pos
        self.pos += 1
        chars: List[str] = []

        while True:
            if self._at_end():
                raise InvalidQueryError("Unterminated string literal", self.text, start)
            char = self.text[self.pos]
            self.pos += 1

            if char == quote:
                return "".join(chars)
            if char != "\\":
                chars.append(char)
                continue

            escape = self._peek()
            self.pos += 1
            if escape == "u":
                code = self.text[self.pos:self.pos + 4]
                if not re.fullmatch(r"[0-9a-fA-F]{4}", code):
                    raise self._error("Invalid unicode escape")
                chars.append(chr(int(code, 16)))
                self.pos += 4
            elif escape in self.ESCAPES:
                chars.append(self.ESCAPES[escape])
            else:
                raise self._error(f"Invalid escape sequence '\\{escape}'")

    def _check_number_tail(self) -> None:
        if self.NUMBER_TAIL_PATTERN.match(self.text, self.pos):
            raise self._error("Malformed numeric literal")

    def _match(self, pattern: "re.Pattern[str]") -> Optional[str]:
        match = pattern.match(self.text, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return match.group(0)

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _consume(self, token: str) -> bool:
        if self.text.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def _expect(self, token: str) -> None:
        if not self._consume(token):
            if self._at_end():
                raise self._error(f"Expected {token!r} but query ended")
            raise self._error(f"Expected {token!r}, found {self._peek()!r}")

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _error(self, reason: str) -> InvalidQueryError:
        return InvalidQueryError(reason, self.text, self.pos)