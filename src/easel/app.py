from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pygame

from easel.canvas import Canvas
from easel.config import brush_sizes, canvas_settings, load_config, log_level, palette, session_kwargs
from easel.errors import ConfigurationError
from easel.host import HostBinding
from easel.paths import ensure_directories, get_data_root
from easel.preview import compose, frame_size
from easel.tools import EventKind, MouseButton, PaintSession, Tool
from easel.ui.common import Button, create_window, set_tool_cursor, to_pointer_event


logger = logging.getLogger(__name__)

TOOL_ORDER = [Tool.PENCIL, Tool.ERASER, Tool.COLOR_PICKER, Tool.AIRBRUSH, Tool.LINE, Tool.CIRCLE]
TOOL_LABELS = {
    Tool.PENCIL: "Pencil",
    Tool.ERASER: "Eraser",
    Tool.COLOR_PICKER: "Picker",
    Tool.AIRBRUSH: "Airbrush",
    Tool.LINE: "Line",
    Tool.CIRCLE: "Circle",
}
TOOL_KEYS = {getattr(pygame, f"K_{idx + 1}"): tool for idx, tool in enumerate(TOOL_ORDER)}


def _save_surface_atomic(surface: pygame.Surface, path: Path) -> None:
    # pygame picks the encoder from the extension, so keep ".png" last.
    tmp_path = path.with_name(path.stem + ".tmp" + path.suffix)
    pygame.image.save(surface, str(tmp_path))
    os.replace(tmp_path, path)


def _list_images(images_dir: Path) -> List[Path]:
    files = [path for path in images_dir.glob("*.png") if ".tmp" not in path.suffixes]
    files.sort(key=lambda path: (path.stat().st_mtime, path.name), reverse=True)
    return files


def _snapshot_path(images_dir: Path, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
    candidate = images_dir / f"{stamp}.png"
    counter = 1
    while candidate.exists():
        candidate = images_dir / f"{stamp}_{counter}.png"
        counter += 1
    return candidate


def _load_canvas_image(path: Path) -> Optional[pygame.Surface]:
    try:
        return pygame.image.load(str(path))
    except (pygame.error, OSError):
        logger.exception("Could not load %s", path)
        return None


def _status_text(session: PaintSession, pointer: Optional[Tuple[int, int]], unsaved: bool) -> str:
    tool = TOOL_LABELS[session.tool] if session.tool is not None else "No tool"
    parts = [tool, f"size {session.brush_size}"]
    if pointer is not None:
        parts.append(f"{pointer[0]}, {pointer[1]}")
    if unsaved:
        parts.append("unsaved")
    return "  |  ".join(parts)


class PaintApp(HostBinding):
    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        screen: Optional[pygame.Surface] = None,
        clock: Optional[pygame.time.Clock] = None,
    ) -> None:
        self.config = config if config is not None else load_config()
        self.data_root = get_data_root(self.config)
        self.images_dir = ensure_directories(self.data_root)["images"]

        settings = canvas_settings(self.config)
        self.canvas_size = (settings["width"], settings["height"])
        self.palette = palette(self.config)
        self.size_values = brush_sizes(self.config)

        self.margin = 12
        self.menu_pad = 8
        self.menu_gap = 6
        self.menu_bg = (236, 233, 226)
        self.button_size = (84, 28)
        self.status_height = 24
        panel_width = self.button_size[0] + self.menu_pad * 2
        view_w, view_h = frame_size(*self.canvas_size)
        window_size = (
            panel_width + view_w + 3 * self.margin,
            max(view_h, 480) + 2 * self.margin + self.status_height,
        )

        if screen is None:
            self.screen, self.screen_rect = create_window(window_size, "Easel")
        else:
            self.screen = screen
            self.screen_rect = screen.get_rect()
        self.clock = clock or pygame.time.Clock()
        self.font = pygame.font.SysFont("sans", 15)

        self.controls_rect = pygame.Rect(
            self.margin,
            self.margin,
            panel_width,
            self.screen_rect.height - 2 * self.margin - self.status_height,
        )
        self.view_rect = pygame.Rect(
            self.controls_rect.right + self.margin,
            self.margin,
            self.screen_rect.width - self.controls_rect.right - 2 * self.margin,
            self.controls_rect.height,
        )

        self.unsaved = False
        self.pointer: Optional[Tuple[int, int]] = None
        self.pointer_in_canvas = False
        self.dirty = True

        canvas = Canvas(*self.canvas_size, background=settings["background"])
        self.session = PaintSession(canvas, self, **session_kwargs(self.config))

        self.tool_buttons: Dict[Tool, Button] = {}
        self.size_buttons: Dict[int, Button] = {}
        self.palette_buttons: List[Button] = []
        self._build_ui()

    # -- host binding ------------------------------------------------------

    def notify_pointer_moved(self, x: int, y: int) -> None:
        self.pointer = (x, y)
        self.dirty = True

    def notify_unsaved(self) -> None:
        self.unsaved = True

    def notify_foreground_changed(self) -> None:
        logger.info("Foreground picked: %s", self.session.foreground)
        self.dirty = True

    def notify_background_changed(self) -> None:
        logger.info("Background picked: %s", self.session.background)
        self.dirty = True

    def request_cursor_for(self, tool: Tool) -> None:
        if pygame.display.get_surface() is None:
            return
        try:
            set_tool_cursor(tool)
        except pygame.error as exc:
            logger.debug("Cursor change unsupported: %s", exc)

    # -- layout ------------------------------------------------------------

    def _build_ui(self) -> None:
        self.tool_buttons.clear()
        self.size_buttons.clear()
        self.palette_buttons.clear()

        left = self.controls_rect.left + self.menu_pad
        top = self.controls_rect.top + self.menu_pad
        width, height = self.button_size
        for tool in TOOL_ORDER:
            rect = pygame.Rect(left, top, width, height)
            self.tool_buttons[tool] = Button(rect=rect, label=TOOL_LABELS[tool], fill=(248, 248, 248))
            top += height + self.menu_gap

        top += self.menu_gap
        size_height = 18
        for size in self.size_values:
            rect = pygame.Rect(left, top, width, size_height)
            self.size_buttons[size] = Button(rect=rect, label=str(size), fill=(248, 248, 248))
            top += size_height + self.menu_gap // 2

        top += self.menu_gap + 36
        columns = 4
        swatch = (width - (columns - 1) * 4) // columns
        for idx, color in enumerate(self.palette):
            row, col = divmod(idx, columns)
            rect = pygame.Rect(left + col * (swatch + 4), top + row * (swatch + 4), swatch, swatch)
            self.palette_buttons.append(Button(rect=rect, fill=color[:3], border_width=1))

    def _color_well_rects(self) -> Tuple[pygame.Rect, pygame.Rect]:
        first_swatch = self.palette_buttons[0].rect if self.palette_buttons else self.controls_rect
        top = first_swatch.top - 36
        left = self.controls_rect.left + self.menu_pad
        return pygame.Rect(left, top, 28, 28), pygame.Rect(left + 16, top + 6, 28, 28)

    # -- actions -----------------------------------------------------------

    def select_tool(self, tool: Any) -> None:
        try:
            self.session.set_tool(tool)
        except ConfigurationError as exc:
            logger.error("Rejected tool selection: %s", exc)
            return
        self.dirty = True

    def change_brush_size(self, size: int) -> None:
        try:
            self.session.set_brush_size(size)
        except ConfigurationError as exc:
            logger.warning("%s", exc)
            return
        self.dirty = True

    def new_canvas(self) -> None:
        self.session.new_blank_canvas(*self.canvas_size)
        self.unsaved = False
        self.dirty = True

    def save_canvas(self) -> Optional[Path]:
        path = _snapshot_path(self.images_dir)
        try:
            _save_surface_atomic(self.session.canvas_snapshot().surface, path)
        except (pygame.error, OSError):
            logger.exception("Could not save %s", path)
            return None
        logger.info("Saved %s", path)
        self.unsaved = False
        self.dirty = True
        return path

    def load_latest(self) -> bool:
        for path in _list_images(self.images_dir):
            image = _load_canvas_image(path)
            if image is None:
                continue
            self.session.load_image(image)
            self.unsaved = False
            self.dirty = True
            logger.info("Loaded %s", path)
            return True
        logger.info("No saved images in %s", self.images_dir)
        return False

    # -- events ------------------------------------------------------------

    def _canvas_origin(self) -> Tuple[int, int]:
        return self.view_rect.topleft

    def _handle_controls_press(self, pos: Tuple[int, int], button: MouseButton) -> None:
        for tool, tool_button in self.tool_buttons.items():
            if tool_button.hit(pos):
                self.select_tool(tool)
                return
        for size, size_button in self.size_buttons.items():
            if size_button.hit(pos):
                self.change_brush_size(size)
                return
        for idx, swatch in enumerate(self.palette_buttons):
            if swatch.hit(pos):
                if button is MouseButton.SECONDARY:
                    self.session.set_background(self.palette[idx])
                else:
                    self.session.set_foreground(self.palette[idx])
                self.dirty = True
                return

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns False when the app should quit."""
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            return self._handle_key(event)

        pointer = to_pointer_event(
            event,
            self._canvas_origin(),
            self.screen_rect,
            pointer_down=self.pointer_in_canvas,
        )
        if pointer is None:
            return True
        ox, oy = self._canvas_origin()
        pos = (pointer.x + ox, pointer.y + oy)
        inside = self.view_rect.collidepoint(pos) and self.session.canvas.contains(pointer.x, pointer.y)

        if pointer.kind is EventKind.PRESS:
            if not inside:
                self._handle_controls_press(pos, pointer.button)
                return True
            self.pointer_in_canvas = True
        elif pointer.kind is EventKind.RELEASE:
            if not self.pointer_in_canvas:
                return True
            self.pointer_in_canvas = False
        elif pointer.kind is EventKind.MOVE and not inside:
            return True
        elif pointer.kind is EventKind.DRAG and not self.pointer_in_canvas:
            return True

        if self.session.handle(pointer):
            self.dirty = True
        return True

    def _handle_key(self, event: pygame.event.Event) -> bool:
        if event.key == pygame.K_ESCAPE:
            return False
        if event.key in TOOL_KEYS:
            self.select_tool(TOOL_KEYS[event.key])
        elif event.key in {pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS}:
            self.change_brush_size(self.session.brush_size + 1)
        elif event.key in {pygame.K_MINUS, pygame.K_KP_MINUS}:
            self.change_brush_size(self.session.brush_size - 1)
        elif event.key == pygame.K_n:
            self.new_canvas()
        elif event.key == pygame.K_s:
            self.save_canvas()
        elif event.key == pygame.K_l:
            self.load_latest()
        return True

    # -- rendering ---------------------------------------------------------

    def _render(self) -> None:
        self.screen.fill((250, 248, 244))
        pygame.draw.rect(self.screen, self.menu_bg, self.controls_rect)

        for tool, button in self.tool_buttons.items():
            button.draw(self.screen, self.font)
            if tool is self.session.tool:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=2, border_radius=6)

        for size, button in self.size_buttons.items():
            button.draw(self.screen, self.font)
            if size == self.session.brush_size:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=2, border_radius=6)

        back_rect, fore_rect = self._color_well_rects()
        pygame.draw.rect(self.screen, self.session.background[:3], back_rect)
        pygame.draw.rect(self.screen, (30, 30, 30), back_rect, width=1)
        pygame.draw.rect(self.screen, self.session.foreground[:3], fore_rect)
        pygame.draw.rect(self.screen, (30, 30, 30), fore_rect, width=1)

        for button in self.palette_buttons:
            button.draw(self.screen)

        self.screen.set_clip(self.view_rect)
        compose(self.session, self.screen, self._canvas_origin())
        self.screen.set_clip(None)

        status = self.font.render(_status_text(self.session, self.pointer, self.unsaved), True, (40, 40, 40))
        self.screen.blit(status, (self.margin, self.screen_rect.bottom - self.status_height))
        pygame.display.set_caption("Easel *" if self.unsaved else "Easel")
        pygame.display.flip()
        self.dirty = False

    def run(self, *, quit_on_exit: bool = True) -> None:
        running = True
        if self.session.tool is not None:
            self.request_cursor_for(self.session.tool)
        while running:
            for event in pygame.event.get():
                if not self.handle_event(event):
                    running = False
                    break
            if self.dirty:
                self._render()
            self.clock.tick(60)

        if quit_on_exit:
            pygame.quit()


def configure_logging(config: Dict[str, Any]) -> None:
    logging.basicConfig(
        level=log_level(config),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    config = load_config()
    configure_logging(config)
    try:
        PaintApp(config).run(quit_on_exit=True)
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
