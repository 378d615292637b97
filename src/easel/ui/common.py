from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pygame

from easel.tools import EventKind, MouseButton, PointerEvent, Tool


Color = Tuple[int, int, int]
Point = Tuple[int, int]

FINGERDOWN = getattr(pygame, "FINGERDOWN", None)
FINGERMOTION = getattr(pygame, "FINGERMOTION", None)
FINGERUP = getattr(pygame, "FINGERUP", None)

TOOL_CURSORS: Dict[Tool, int] = {
    Tool.PENCIL: pygame.SYSTEM_CURSOR_CROSSHAIR,
    Tool.ERASER: pygame.SYSTEM_CURSOR_HAND,
    Tool.COLOR_PICKER: pygame.SYSTEM_CURSOR_HAND,
    Tool.AIRBRUSH: pygame.SYSTEM_CURSOR_CROSSHAIR,
    Tool.LINE: pygame.SYSTEM_CURSOR_CROSSHAIR,
    Tool.CIRCLE: pygame.SYSTEM_CURSOR_CROSSHAIR,
}


@dataclass
class Button:
    rect: pygame.Rect
    label: str = ""
    fill: Optional[Color] = None
    border_color: Optional[Color] = (30, 30, 30)
    border_width: int = 0

    def draw(self, surface: pygame.Surface, font: Optional[pygame.font.Font] = None) -> None:
        if self.fill is not None:
            pygame.draw.rect(surface, self.fill, self.rect, border_radius=6)
        if self.border_color is not None and self.border_width > 0:
            pygame.draw.rect(
                surface,
                self.border_color,
                self.rect,
                width=self.border_width,
                border_radius=6,
            )
        if self.label and font is not None:
            text = font.render(self.label, True, (20, 20, 20))
            text_rect = text.get_rect(center=self.rect.center)
            surface.blit(text, text_rect)

    def hit(self, pos: Tuple[int, int]) -> bool:
        return self.rect.collidepoint(pos)


def create_window(size: Tuple[int, int], caption: str) -> Tuple[pygame.Surface, pygame.Rect]:
    pygame.init()
    screen = pygame.display.set_mode(size)
    pygame.display.set_caption(caption)
    pygame.mouse.set_visible(True)
    return screen, screen.get_rect()


def mouse_button(event: pygame.event.Event) -> MouseButton:
    # Some touch stacks emit emulated mouse events with button 0.
    button = getattr(event, "button", 1)
    if button in {0, 1} or getattr(event, "touch", False):
        return MouseButton.PRIMARY
    if button == 3:
        return MouseButton.SECONDARY
    return MouseButton.OTHER


def is_wheel_event(event: pygame.event.Event) -> bool:
    # pygame 2 still reports wheel ticks as buttons 4 and 5.
    return event.type in {pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP} and getattr(event, "button", 1) in {4, 5}


def pointer_event_pos(event: pygame.event.Event, screen_rect: pygame.Rect) -> Optional[Point]:
    if hasattr(event, "pos"):
        return event.pos
    if event.type in {FINGERDOWN, FINGERMOTION, FINGERUP} - {None}:
        return (
            int(event.x * screen_rect.width),
            int(event.y * screen_rect.height),
        )
    return None


def to_pointer_event(
    event: pygame.event.Event,
    origin: Point,
    screen_rect: pygame.Rect,
    *,
    pointer_down: bool = False,
) -> Optional[PointerEvent]:
    """Translate a pygame pointer event into canvas coordinates relative to ``origin``."""
    if is_wheel_event(event):
        return None
    if event.type in {pygame.MOUSEBUTTONDOWN, FINGERDOWN} - {None}:
        kind = EventKind.PRESS
    elif event.type in {pygame.MOUSEBUTTONUP, FINGERUP} - {None}:
        kind = EventKind.RELEASE
    elif event.type == pygame.MOUSEMOTION:
        kind = EventKind.DRAG if pointer_down or any(getattr(event, "buttons", ())) else EventKind.MOVE
    elif FINGERMOTION is not None and event.type == FINGERMOTION:
        kind = EventKind.DRAG
    else:
        return None
    pos = pointer_event_pos(event, screen_rect)
    if pos is None:
        return None
    button = mouse_button(event) if event.type in {pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP} else MouseButton.PRIMARY
    return PointerEvent(kind=kind, x=pos[0] - origin[0], y=pos[1] - origin[1], button=button)


def set_tool_cursor(tool: Tool) -> None:
    pygame.mouse.set_cursor(TOOL_CURSORS.get(tool, pygame.SYSTEM_CURSOR_ARROW))
