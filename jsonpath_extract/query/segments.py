"""
Compiled path segments and path expressions.

A PathExpression is an ordered tuple of segments. Evaluation starts with the
document root as the only candidate, and each segment maps the current
candidate list to the next one, preserving discovery order.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .filters import Predicate
from .values import JsonKind, children, kind_of


class Segment:
    """One step of a compiled query."""

    def apply(self, candidates: List[Any], root: Any) -> List[Any]:
        """Apply the segment to every candidate, concatenating results in order."""
        results: List[Any] = []
        for candidate in candidates:
            results.extend(self.select(candidate, root))
        return results

    def select(self, candidate: Any, root: Any) -> List[Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class FieldSegment(Segment):
    """Object member access by name (.name, ['name'])."""

    name: str

    def select(self, candidate: Any, root: Any) -> List[Any]:
        if kind_of(candidate) is JsonKind.OBJECT and self.name in candidate:
            return [candidate[self.name]]
        return []


@dataclass(frozen=True)
class WildcardSegment(Segment):
    """All immediate children (.*, [*])."""

    def select(self, candidate: Any, root: Any) -> List[Any]:
        return children(candidate)


@dataclass(frozen=True)
class IndexSegment(Segment):
    """Array element by position; negative positions count from the end."""

    index: int

    def select(self, candidate: Any, root: Any) -> List[Any]:
        if kind_of(candidate) is not JsonKind.ARRAY:
            return []
        if not -len(candidate) <= self.index < len(candidate):
            return []
        return [candidate[self.index]]


@dataclass(frozen=True)
class SliceSegment(Segment):
    """Array slice [start:end:step] with Python slice semantics."""

    start: Optional[int] = None
    end: Optional[int] = None
    step: Optional[int] = None

    def select(self, candidate: Any, root: Any) -> List[Any]:
        if kind_of(candidate) is not JsonKind.ARRAY:
            return []
        return candidate[self.start:self.end:self.step]


@dataclass(frozen=True)
class RecursiveDescentSegment(Segment):
    """
    The candidate itself followed by all of its descendants, in pre-order.

    Uses an explicit stack so document depth is not bounded by the
    interpreter's recursion limit. Containers that appear among their own
    ancestors (only possible for hand-built Python structures) raise
    ValueError.
    """

    def select(self, candidate: Any, root: Any) -> List[Any]:
        results: List[Any] = []
        ancestors: List[int] = []
        stack = [(candidate, 0)]

        while stack:
            node, depth = stack.pop()
            del ancestors[depth:]
            results.append(node)

            node_children = children(node)
            if not node_children:
                continue

            if id(node) in ancestors:
                raise ValueError("Cyclic reference found during recursive descent")
            ancestors.append(id(node))

            for child in reversed(node_children):
                stack.append((child, depth + 1))

        return results


@dataclass(frozen=True)
class DescendantWildcardSegment(RecursiveDescentSegment):
    """All descendants of the candidate in pre-order, excluding the candidate (..*)."""

    def select(self, candidate: Any, root: Any) -> List[Any]:
        return super().select(candidate, root)[1:]


@dataclass(frozen=True)
class FilterSegment(Segment):
    """Children of the candidate for which the predicate holds ([?(...)])."""

    predicate: Predicate

    def select(self, candidate: Any, root: Any) -> List[Any]:
        return [child for child in children(candidate) if self.predicate.matches(child, root)]


@dataclass(frozen=True)
class PathExpression:
    """A compiled query: the source text and its ordered segments."""

    source: str
    segments: Tuple[Segment, ...] = ()

    def find(self, document: Any) -> List[Any]:
        """
        Evaluate the expression against a document.

        Args:
            document: Decoded JSON value (not modified)

        Returns:
            List of matching values in discovery order
        """
        candidates = [document]
        for segment in self.segments:
            candidates = segment.apply(candidates, document)
            if not candidates:
                break
        return candidates
