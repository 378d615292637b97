from __future__ import annotations

from typing import Optional, Tuple

import pygame

from easel.canvas import Color, draw_shape
from easel.geometry import Shape
from easel.tools import PaintSession


BORDER_STEPS = 5
BORDER_SHADE_STEP = 63


def frame_size(width: int, height: int) -> Tuple[int, int]:
    return (width + BORDER_STEPS, height + BORDER_STEPS)


def pending_preview(session: PaintSession) -> Optional[Tuple[Shape, Color]]:
    shape = session.pending_shape()
    if shape is None:
        return None
    return shape, session.foreground


def draw_border(target: pygame.Surface, origin: Tuple[int, int], width: int, height: int) -> None:
    """Stepped dark-to-light frame along the bottom and right canvas edges."""
    ox, oy = origin
    shade = 0
    for step in range(BORDER_STEPS):
        color = (shade, shade, shade)
        pygame.draw.line(target, color, (ox, oy + height + step), (ox + width + step, oy + height + step))
        pygame.draw.line(target, color, (ox + width + step, oy), (ox + width + step, oy + height + step))
        shade += BORDER_SHADE_STEP


def compose(session: PaintSession, target: pygame.Surface, origin: Tuple[int, int] = (0, 0)) -> None:
    canvas = session.canvas
    draw_border(target, origin, canvas.width, canvas.height)
    target.blit(canvas.surface, origin)
    preview = pending_preview(session)
    if preview is None:
        return
    shape, color = preview
    draw_shape(target, shape, color, size=canvas.size, antialias=session.antialias, origin=origin)
