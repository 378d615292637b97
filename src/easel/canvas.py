from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import pygame

from easel.errors import ConfigurationError
from easel.geometry import Shape, Span, outline, shape_spans


Color = Tuple[int, int, int, int]

logger = logging.getLogger(__name__)


def coerce_color(value: object) -> Color:
    if value is None:
        raise ConfigurationError("color must not be None")
    if isinstance(value, pygame.Color):
        return (value.r, value.g, value.b, value.a)
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) not in {6, 8}:
            raise ConfigurationError(f"invalid color string: {value!r}")
        try:
            channels = [int(text[idx : idx + 2], 16) for idx in range(0, len(text), 2)]
        except ValueError as exc:
            raise ConfigurationError(f"invalid color string: {value!r}") from exc
        return _channels_to_color(channels, value)
    if isinstance(value, (tuple, list)):
        return _channels_to_color(list(value), value)
    raise ConfigurationError(f"unsupported color value: {value!r}")


def _channels_to_color(channels: List[object], original: object) -> Color:
    if len(channels) == 3:
        channels = channels + [255]
    if len(channels) != 4:
        raise ConfigurationError(f"color needs 3 or 4 channels: {original!r}")
    for channel in channels:
        if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
            raise ConfigurationError(f"color channels must be ints in 0..255: {original!r}")
    r, g, b, a = channels
    return (r, g, b, a)


def opaque(color: Sequence[int]) -> Color:
    return (color[0], color[1], color[2], 255)


def new_surface(width: int, height: int, background: Color) -> pygame.Surface:
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"canvas size must be positive, got {width}x{height}")
    surface = pygame.Surface((width, height), pygame.SRCALPHA, 32)
    surface.fill(background)
    return surface


def fill_spans(surface: pygame.Surface, spans: Iterable[Span], color: Color, origin: Tuple[int, int] = (0, 0)) -> None:
    ox, oy = origin
    for row, start, end in spans:
        surface.fill(color, pygame.Rect(ox + start, oy + row, end - start, 1))


def draw_shape(
    surface: pygame.Surface,
    shape: Shape,
    color: Color,
    *,
    size: Tuple[int, int],
    antialias: bool = False,
    origin: Tuple[int, int] = (0, 0),
) -> None:
    """Rasterize ``shape`` onto ``surface``, clipped to ``size`` at ``origin``."""
    fill_spans(surface, shape_spans(shape, clip=size), color, origin)
    if not antialias:
        return
    ox, oy = origin
    width, height = size
    # aalines works in pixel-index space; a sample at x + 0.5 lands on pixel x.
    previous_clip = surface.get_clip()
    surface.set_clip(pygame.Rect(ox, oy, width, height).clip(previous_clip))
    for path in outline(shape):
        points = [(ox + x - 0.5, oy + y - 0.5) for x, y in path]
        pygame.draw.aalines(surface, color, True, points)
    surface.set_clip(previous_clip)


@dataclass
class CanvasSnapshot:
    width: int
    height: int
    surface: pygame.Surface


class Canvas:
    def __init__(self, width: int, height: int, background: object = (255, 255, 255, 255)) -> None:
        self.surface = new_surface(width, height, coerce_color(background))
        self._replace_listeners: List[Callable[[], None]] = []

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.get_size()

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Optional[Color]:
        if not self.contains(x, y):
            return None
        pixel = self.surface.get_at((x, y))
        return (pixel.r, pixel.g, pixel.b, pixel.a)

    def set(self, x: int, y: int, color: Color) -> None:
        if self.contains(x, y):
            self.surface.set_at((x, y), color)

    def fill(self, color: object) -> None:
        self.surface.fill(coerce_color(color))

    def fill_spans(self, spans: Iterable[Span], color: Color) -> None:
        fill_spans(self.surface, spans, color)

    def paint(self, shape: Shape, color: Color, *, antialias: bool = False) -> None:
        draw_shape(self.surface, shape, color, size=self.size, antialias=antialias)

    def add_replace_listener(self, listener: Callable[[], None]) -> None:
        self._replace_listeners.append(listener)

    def replace(self, surface: pygame.Surface) -> None:
        width, height = surface.get_size()
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"canvas size must be positive, got {width}x{height}")
        if surface.get_flags() & pygame.SRCALPHA and surface.get_bitsize() == 32:
            buffer = surface.copy()
        else:
            buffer = new_surface(width, height, (0, 0, 0, 255))
            buffer.blit(surface, (0, 0))
        self.surface = buffer
        logger.info("Canvas replaced with %dx%d buffer", width, height)
        for listener in self._replace_listeners:
            listener()

    def snapshot(self) -> CanvasSnapshot:
        return CanvasSnapshot(width=self.width, height=self.height, surface=self.surface.copy())
