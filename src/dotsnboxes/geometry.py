"""Lattice points, canonical edge addressing and board enumeration."""

from __future__ import annotations

from typing import Iterator, List, NamedTuple, Sequence, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")


# ---------- Addressing ----------


class Point(NamedTuple):
    x: int
    y: int

    def to_wire(self) -> dict:
        return {"x": self.x, "y": self.y}


class Edge(NamedTuple):
    # ``from`` is a keyword, so the wire names live in to_wire()
    start: Point
    end: Point

    @classmethod
    def between(cls, x1: int, y1: int, x2: int, y2: int) -> "Edge":
        return cls(Point(x1, y1), Point(x2, y2))

    def to_wire(self) -> dict:
        return {"from": self.start.to_wire(), "to": self.end.to_wire()}


def order(edge: Edge) -> Edge:
    """Return ``edge`` with its smaller endpoint first.

    Points compare by ``x`` and then by ``y``, so horizontal edges are ordered
    left to right and vertical edges top to bottom. The result never depends
    on which endpoint the caller supplied first.
    """

    start, end = edge
    if start > end:
        return Edge(Point(*end), Point(*start))
    return Edge(Point(*start), Point(*end))


def edge_key(edge: Edge) -> str:
    start, end = order(edge)
    return f"from-{start.x}-{start.y}-to-{end.x}-{end.y}"


def box_key(x: int, y: int) -> str:
    """Key of the box whose top-left dot is ``(x, y)``."""
    return f"{x}-{y}"


# ---------- Enumeration ----------


class Count:
    """Finite integer sequence ``0 .. n-1``.

    Every iteration starts again from zero; nothing is materialized up front
    and no cursor is shared between two loops over the same ``Count``.
    """

    __slots__ = ("n",)

    def __init__(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"Count needs a non-negative bound, got {n}")
        self.n = n

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.n))

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return f"Count({self.n})"


def interleave(a: Sequence[T], b: Sequence[U]) -> List[T | U]:
    """Return ``a[0], b[0], a[1], b[1], ...``.

    Callers pass sequences of equal length. A length mismatch is not checked;
    the result is cut at the shorter sequence.
    """

    out: List[T | U] = []
    for left, right in zip(a, b):
        out.append(left)
        out.append(right)
    return out


# ---------- Board ----------


def horizontal_edges(n: int, y: int) -> List[Edge]:
    return [Edge.between(x, y, x + 1, y) for x in Count(n)]


def vertical_edges(n: int, y: int) -> List[Edge]:
    return [Edge.between(x, y, x, y + 1) for x in Count(n + 1)]


def all_edges(n: int, m: int) -> List[Edge]:
    """Every drawable edge of an ``n`` by ``m`` board, row by row."""

    edges: List[Edge] = []
    for y in Count(m + 1):
        edges.extend(horizontal_edges(n, y))
        if y < m:
            edges.extend(vertical_edges(n, y))
    return edges


def board_rows(n: int, m: int) -> List[List[Tuple[str, object]]]:
    """Describe the board top to bottom as rows of tagged cells.

    Rows alternate between ``dot``/``edge`` rows (``m + 1`` of them) and
    ``edge``/``box`` rows (``m`` of them). Each cell is ``(kind, value)`` where
    value is a ``Point`` for dots and boxes and an ``Edge`` for edges.
    """

    dot_rows = []
    for y in Count(m + 1):
        dots = [("dot", Point(x, y)) for x in Count(n + 1)]
        lines = [("edge", edge) for edge in horizontal_edges(n, y)]
        # one dot more than lines: the last dot closes the row
        dot_rows.append(interleave(dots, lines) + [dots[-1]])

    box_rows = []
    for y in Count(m):
        lines = [("edge", edge) for edge in vertical_edges(n, y)]
        boxes = [("box", Point(x, y)) for x in Count(n)]
        box_rows.append(interleave(lines, boxes) + [lines[-1]])

    return interleave(dot_rows, box_rows) + [dot_rows[-1]]
