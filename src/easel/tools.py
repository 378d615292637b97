from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import pygame

from easel.canvas import Canvas, CanvasSnapshot, Color, coerce_color, new_surface, opaque
from easel.errors import UnknownToolError
from easel.geometry import (
    Brush,
    Point,
    Shape,
    circle_outline,
    sample_point,
    square_at,
    thick_segment,
)
from easel.host import HostBinding


logger = logging.getLogger(__name__)


class Tool(Enum):
    PENCIL = "pencil"
    ERASER = "eraser"
    COLOR_PICKER = "color_picker"
    AIRBRUSH = "airbrush"
    LINE = "line"
    CIRCLE = "circle"

    @classmethod
    def parse(cls, value: Union["Tool", str]) -> "Tool":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            for tool in cls:
                if tool.value == key:
                    return tool
        raise UnknownToolError(value)

    @property
    def anchored(self) -> bool:
        return self in {Tool.LINE, Tool.CIRCLE}


class EventKind(Enum):
    PRESS = "press"
    DRAG = "drag"
    MOVE = "move"
    RELEASE = "release"


class MouseButton(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    OTHER = "other"


@dataclass(frozen=True)
class PointerEvent:
    kind: EventKind
    x: int
    y: int
    button: MouseButton = MouseButton.PRIMARY

    @property
    def sample(self) -> Point:
        return sample_point(self.x, self.y)


class PaintSession:
    def __init__(
        self,
        canvas: Canvas,
        host: Optional[HostBinding] = None,
        *,
        foreground: object = (0, 0, 0, 255),
        background: object = (255, 255, 255, 255),
        brush_size: int = 0,
        tool: Optional[Union[Tool, str]] = None,
        antialias: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.canvas = canvas
        self.host = host or HostBinding()
        self._foreground = coerce_color(foreground)
        self._background = coerce_color(background)
        self.brush = Brush(brush_size)
        self.antialias = antialias
        self.rng = rng or random.Random()

        self._tool: Optional[Tool] = None
        self.anchor: Optional[Point] = None
        self.last_sample: Optional[Point] = None
        self.pointer: Optional[Point] = None

        canvas.add_replace_listener(self._reset_ephemeral)
        if tool is not None:
            self.set_tool(tool)

    # -- configuration -----------------------------------------------------

    @property
    def tool(self) -> Optional[Tool]:
        return self._tool

    @property
    def foreground(self) -> Color:
        return self._foreground

    @property
    def background(self) -> Color:
        return self._background

    @property
    def brush_size(self) -> int:
        return self.brush.size

    def set_tool(self, tool: Union[Tool, str]) -> Tool:
        parsed = Tool.parse(tool)
        self._reset_ephemeral()
        self._tool = parsed
        logger.debug("Active tool: %s", parsed.value)
        self.host.request_cursor_for(parsed)
        return parsed

    def set_foreground(self, color: object) -> bool:
        self._foreground = coerce_color(color)
        return self.anchor is not None

    def set_background(self, color: object) -> None:
        self._background = coerce_color(color)

    def set_brush_size(self, size: int) -> bool:
        self.brush.resize(size)
        return self.anchor is not None

    def new_blank_canvas(self, width: int, height: int, background: Optional[object] = None) -> None:
        fill = self._background if background is None else coerce_color(background)
        self.canvas.replace(new_surface(width, height, fill))

    def load_image(self, surface: pygame.Surface) -> None:
        self.canvas.replace(surface)

    def _reset_ephemeral(self) -> None:
        self.anchor = None
        self.last_sample = None

    # -- queries -----------------------------------------------------------

    def canvas_snapshot(self) -> CanvasSnapshot:
        return self.canvas.snapshot()

    def pending_shape(self) -> Optional[Shape]:
        """The uncommitted line or circle from the anchor to the pointer."""
        if self.anchor is None or self.pointer is None:
            return None
        if self._tool is Tool.LINE:
            return thick_segment(self.anchor, self.pointer, self.brush.half_width)
        if self._tool is Tool.CIRCLE:
            return circle_outline(self.anchor, self.pointer, self.brush.stroke_width)
        return None

    # -- event intake ------------------------------------------------------

    def handle(self, event: PointerEvent) -> bool:
        """Apply one pointer event; returns True when the view needs a redraw."""
        sample = event.sample
        self.pointer = sample
        self.host.notify_pointer_moved(event.x, event.y)

        if event.kind is EventKind.RELEASE:
            self.last_sample = None
            return False
        if event.kind is EventKind.MOVE:
            return self.anchor is not None

        tool = self._tool
        if tool is None:
            logger.warning("Ignoring %s at (%d, %d): no active tool", event.kind.value, event.x, event.y)
            return False

        if event.kind is EventKind.PRESS:
            logger.debug("Press at %s with %s", sample, tool.value)
            redraw = self._press(tool, event, sample)
        else:
            redraw = self._drag(tool, sample)
        if not tool.anchored:
            self.last_sample = sample
        return redraw

    def _press(self, tool: Tool, event: PointerEvent, sample: Point) -> bool:
        half = self.brush.half_width
        if tool is Tool.PENCIL:
            return self._commit(square_at(sample, half), self._foreground)
        if tool is Tool.ERASER:
            return self._commit(square_at(sample, half), self._background)
        if tool is Tool.AIRBRUSH:
            return self._spray(sample)
        if tool is Tool.COLOR_PICKER:
            return self._pick(event)
        if self.anchor is None:
            self.anchor = sample
            return True
        if tool is Tool.LINE:
            shape: Shape = thick_segment(self.anchor, sample, half)
        else:
            shape = circle_outline(self.anchor, sample, self.brush.stroke_width)
        self.anchor = None
        return self._commit(shape, self._foreground)

    def _drag(self, tool: Tool, sample: Point) -> bool:
        if tool in {Tool.PENCIL, Tool.ERASER}:
            color = self._foreground if tool is Tool.PENCIL else self._background
            start = self.last_sample if self.last_sample is not None else sample
            return self._commit(thick_segment(start, sample, self.brush.half_width), color)
        if tool is Tool.AIRBRUSH:
            return self._spray(sample)
        return False

    def _commit(self, shape: Shape, color: Color) -> bool:
        self.canvas.paint(shape, color, antialias=self.antialias)
        self.host.notify_unsaved()
        return True

    def _spray(self, sample: Point) -> bool:
        width = self.brush.stroke_width
        # First pixel column/row whose centre lies inside the brush square.
        left = math.ceil(sample[0] - self.brush.half_width - 0.5)
        top = math.ceil(sample[1] - self.brush.half_width - 0.5)
        count = width * width // 20 + 1
        for _ in range(count):
            x = left + int(self.rng.random() * width)
            y = top + int(self.rng.random() * width)
            self.canvas.set(x, y, self._foreground)
        self.host.notify_unsaved()
        return True

    def _pick(self, event: PointerEvent) -> bool:
        picked = self.canvas.get(event.x, event.y)
        if picked is None:
            logger.debug("Color pick outside canvas at (%d, %d)", event.x, event.y)
            return False
        if event.button is MouseButton.PRIMARY:
            self._foreground = opaque(picked)
            self.host.notify_foreground_changed()
        elif event.button is MouseButton.SECONDARY:
            self._background = opaque(picked)
            self.host.notify_background_changed()
        return False

