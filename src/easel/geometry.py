from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Set, Tuple, Union

from easel.errors import ConfigurationError


Point = Tuple[float, float]
# (row, first column, end column exclusive)
Span = Tuple[int, int, int]


@dataclass(frozen=True)
class Polygon:
    vertices: Tuple[Point, ...]


@dataclass(frozen=True)
class Ring:
    center: Point
    radius: float
    width: float

    @property
    def outer(self) -> float:
        return self.radius + self.width / 2.0

    @property
    def inner(self) -> float:
        return max(0.0, self.radius - self.width / 2.0)


Shape = Union[Polygon, Ring]


@dataclass
class Brush:
    size: int = 0

    def __post_init__(self) -> None:
        self.size = validate_brush_size(self.size)

    @property
    def stroke_width(self) -> int:
        return self.size + 1

    @property
    def half_width(self) -> float:
        return self.stroke_width / 2.0

    def resize(self, size: int) -> None:
        self.size = validate_brush_size(size)


def validate_brush_size(size: object) -> int:
    if isinstance(size, bool) or not isinstance(size, int):
        raise ConfigurationError(f"brush size must be an integer, got {size!r}")
    if size < 0:
        raise ConfigurationError(f"brush size must be non-negative, got {size}")
    return size


def sample_point(px: int, py: int) -> Point:
    return (px + 0.5, py + 0.5)


def square_at(point: Point, half: float) -> Polygon:
    x, y = point
    return Polygon(
        (
            (x - half, y - half),
            (x + half, y - half),
            (x + half, y + half),
            (x - half, y + half),
        )
    )


def thick_segment(start: Point, end: Point, half: float) -> Polygon:
    """Hexagon sweeping the ``half``-sized square from ``start`` to ``end``.

    The endpoints are ordered top to bottom first. The two corners that join
    the end caps depend on whether the segment runs right (rising) or left
    (falling); every other vertex is shared by both cases.
    """
    if start == end:
        return square_at(start, half)
    if start[1] > end[1]:
        start, end = end, start
    (fx, fy), (tx, ty) = start, end
    rising = fx <= tx

    a = (fx - half, fy - half)
    b = (fx + half, fy - half)
    c = (tx + half, ty - half) if rising else (fx + half, fy + half)
    d = (tx + half, ty + half)
    e = (tx - half, ty + half)
    f = (fx - half, fy + half) if rising else (tx - half, ty - half)
    return Polygon((a, b, c, d, e, f))


def circle_outline(center: Point, edge: Point, width: float) -> Ring:
    radius = math.hypot(edge[0] - center[0], edge[1] - center[1])
    return Ring(center=center, radius=radius, width=width)


def bounds(shape: Shape) -> Tuple[float, float, float, float]:
    if isinstance(shape, Ring):
        cx, cy = shape.center
        r = shape.outer
        return (cx - r, cy - r, cx + r, cy + r)
    xs = [x for x, _ in shape.vertices]
    ys = [y for _, y in shape.vertices]
    return (min(xs), min(ys), max(xs), max(ys))


def _first_pixel(edge: float) -> int:
    # First pixel whose centre is at or right of ``edge``.
    return math.ceil(edge - 0.5)


def _clip_span(row: int, start: int, end: int, clip: Optional[Tuple[int, int]]) -> Optional[Span]:
    if clip is not None:
        width, height = clip
        if row < 0 or row >= height:
            return None
        start = max(start, 0)
        end = min(end, width)
    if end <= start:
        return None
    return (row, start, end)


def _rows(top: float, bottom: float, clip: Optional[Tuple[int, int]]) -> range:
    first = _first_pixel(top)
    last = _first_pixel(bottom)
    if clip is not None:
        first = max(first, 0)
        last = min(last, clip[1])
    return range(first, last)


def polygon_spans(polygon: Polygon, clip: Optional[Tuple[int, int]] = None) -> List[Span]:
    """Pixel runs whose centres fall inside ``polygon`` (even-odd rule)."""
    vertices = polygon.vertices
    _, top, _, bottom = bounds(polygon)
    edges = []
    for idx, (x0, y0) in enumerate(vertices):
        x1, y1 = vertices[(idx + 1) % len(vertices)]
        if y0 == y1:
            continue
        if y0 > y1:
            x0, y0, x1, y1 = x1, y1, x0, y0
        edges.append((x0, y0, x1, y1))

    spans: List[Span] = []
    for row in _rows(top, bottom, clip):
        yc = row + 0.5
        crossings = sorted(
            x0 + (yc - y0) * (x1 - x0) / (y1 - y0)
            for x0, y0, x1, y1 in edges
            if y0 <= yc < y1
        )
        for left, right in zip(crossings[::2], crossings[1::2]):
            span = _clip_span(row, _first_pixel(left), _first_pixel(right), clip)
            if span is not None:
                spans.append(span)
    return spans


def ring_spans(ring: Ring, clip: Optional[Tuple[int, int]] = None) -> List[Span]:
    """Pixel runs whose centres lie within ``[inner, outer)`` of the ring centre."""
    cx, cy = ring.center
    outer = ring.outer
    inner = ring.inner
    spans: List[Span] = []
    for row in _rows(cy - outer, cy + outer, clip):
        dy = abs(row + 0.5 - cy)
        if dy >= outer:
            continue
        ox = math.sqrt(outer * outer - dy * dy)
        left = math.floor(cx - ox - 0.5) + 1
        right = _first_pixel(cx + ox)
        if dy >= inner:
            runs = [(left, right)]
        else:
            ix = math.sqrt(inner * inner - dy * dy)
            runs = [(left, math.floor(cx - ix - 0.5) + 1), (_first_pixel(cx + ix), right)]
        for start, end in runs:
            span = _clip_span(row, start, end, clip)
            if span is not None:
                spans.append(span)
    return spans


def shape_spans(shape: Shape, clip: Optional[Tuple[int, int]] = None) -> List[Span]:
    if isinstance(shape, Ring):
        return ring_spans(shape, clip)
    return polygon_spans(shape, clip)


def iter_pixels(spans: Iterable[Span]) -> Iterator[Tuple[int, int]]:
    for row, start, end in spans:
        for column in range(start, end):
            yield (column, row)


def covered_pixels(shape: Shape, clip: Optional[Tuple[int, int]] = None) -> Set[Tuple[int, int]]:
    return set(iter_pixels(shape_spans(shape, clip)))


def outline(shape: Shape) -> List[List[Point]]:
    """Closed edge paths of ``shape``; a ring yields its outer and inner circle."""
    if isinstance(shape, Polygon):
        return [list(shape.vertices)]
    paths = []
    for radius in (shape.outer, shape.inner):
        if radius <= 0:
            continue
        steps = max(16, int(2 * math.pi * radius))
        cx, cy = shape.center
        paths.append(
            [
                (cx + radius * math.cos(2 * math.pi * i / steps), cy + radius * math.sin(2 * math.pi * i / steps))
                for i in range(steps)
            ]
        )
    return paths
