import os

import pygame
import pytest

from easel.app import PaintApp, _list_images, _load_canvas_image, _snapshot_path, _status_text
from easel.canvas import Canvas
from easel.config import load_config
from easel.tools import EventKind, MouseButton, PaintSession, Tool
from easel.ui.common import mouse_button, to_pointer_event


SCREEN = pygame.Rect(0, 0, 400, 300)


def test_list_images_orders_by_mtime(tmp_path):
    a = tmp_path / "2024-01-01_120000.png"
    b = tmp_path / "2024-01-02_120000.png"
    c = tmp_path / "2024-01-03_120000.png"
    for path in (a, b, c):
        path.write_bytes(b"")
    (tmp_path / "half.tmp.png").write_bytes(b"")

    os.utime(a, (10, 10))
    os.utime(c, (20, 20))
    os.utime(b, (30, 30))

    assert [p.name for p in _list_images(tmp_path)] == [b.name, c.name, a.name]


def test_snapshot_path_adds_counter_on_collision(tmp_path):
    class FixedNow:
        def strftime(self, _fmt: str) -> str:
            return "2026-02-06_101112"

    (tmp_path / "2026-02-06_101112.png").write_bytes(b"old")
    assert _snapshot_path(tmp_path, now=FixedNow()) == tmp_path / "2026-02-06_101112_1.png"


def test_load_canvas_image_returns_none_on_image_error(monkeypatch, tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not-an-image")

    def _raise(*_args, **_kwargs):
        raise pygame.error("bad image")

    monkeypatch.setattr(pygame.image, "load", _raise)
    assert _load_canvas_image(path) is None


def test_mouse_button_classification():
    assert mouse_button(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(1, 1))) is MouseButton.PRIMARY
    assert mouse_button(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=0, pos=(1, 1), touch=True)) is MouseButton.PRIMARY
    assert mouse_button(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(1, 1))) is MouseButton.SECONDARY
    assert mouse_button(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=2, pos=(1, 1))) is MouseButton.OTHER


def test_press_translates_relative_to_origin():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(110, 50))
    pointer = to_pointer_event(event, (100, 20), SCREEN)
    assert pointer.kind is EventKind.PRESS
    assert (pointer.x, pointer.y) == (10, 30)
    assert pointer.button is MouseButton.SECONDARY


def test_motion_with_button_held_is_drag():
    event = pygame.event.Event(pygame.MOUSEMOTION, pos=(5, 5), rel=(1, 1), buttons=(1, 0, 0))
    assert to_pointer_event(event, (0, 0), SCREEN).kind is EventKind.DRAG


def test_motion_without_buttons_is_move():
    event = pygame.event.Event(pygame.MOUSEMOTION, pos=(5, 5), rel=(1, 1), buttons=(0, 0, 0))
    assert to_pointer_event(event, (0, 0), SCREEN).kind is EventKind.MOVE
    assert to_pointer_event(event, (0, 0), SCREEN, pointer_down=True).kind is EventKind.DRAG


def test_release_and_ignored_events():
    up = pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(5, 5))
    assert to_pointer_event(up, (0, 0), SCREEN).kind is EventKind.RELEASE
    wheel = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=4, pos=(5, 5))
    assert to_pointer_event(wheel, (0, 0), SCREEN) is None
    key = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a, mod=0)
    assert to_pointer_event(key, (0, 0), SCREEN) is None


def test_status_text_lists_tool_size_and_pointer():
    session = PaintSession(Canvas(4, 4), tool=Tool.AIRBRUSH, brush_size=3)
    assert _status_text(session, (1, 2), True) == "Airbrush  |  size 3  |  1, 2  |  unsaved"
    assert _status_text(PaintSession(Canvas(4, 4)), None, False) == "No tool  |  size 0"


@pytest.fixture
def app(tmp_path):
    pygame.init()
    config = load_config()
    config["data_root"] = str(tmp_path)
    config["canvas"] = dict(config["canvas"], width=80, height=60)
    screen = pygame.display.set_mode((320, 540))
    yield PaintApp(config, screen=screen)
    pygame.quit()


def _canvas_event(app, kind, x, y, button=1, buttons=(0, 0, 0)):
    ox, oy = app.view_rect.topleft
    if kind == pygame.MOUSEMOTION:
        return pygame.event.Event(kind, pos=(ox + x, oy + y), rel=(0, 0), buttons=buttons)
    return pygame.event.Event(kind, button=button, pos=(ox + x, oy + y))


def test_app_draws_and_marks_unsaved(app):
    assert app.handle_event(_canvas_event(app, pygame.MOUSEBUTTONDOWN, 10, 10))
    app.handle_event(_canvas_event(app, pygame.MOUSEMOTION, 20, 10, buttons=(1, 0, 0)))
    app.handle_event(_canvas_event(app, pygame.MOUSEBUTTONUP, 20, 10))

    assert app.unsaved
    assert app.pointer == (20, 10)
    assert app.session.canvas.get(15, 10) == (0, 0, 0, 255)
    assert app.session.last_sample is None


def test_app_tool_keys_and_quit(app):
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_5, mod=0))
    assert app.session.tool is Tool.LINE
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_MINUS, mod=0))
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_MINUS, mod=0))
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_MINUS, mod=0))
    assert app.session.brush_size == 0
    assert not app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_ESCAPE, mod=0))


def test_app_palette_right_click_sets_background(app):
    swatch = app.palette_buttons[2]
    app.handle_event(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=swatch.rect.center))
    assert app.session.background == app.palette[2]
    assert app.session.foreground == (0, 0, 0, 255)


def test_app_save_then_load_replaces_canvas(app):
    app.handle_event(_canvas_event(app, pygame.MOUSEBUTTONDOWN, 3, 3))
    saved = app.save_canvas()
    assert saved is not None and saved.exists()
    assert not app.unsaved

    app.new_canvas()
    assert app.session.canvas.get(3, 3) == (255, 255, 255, 255)
    assert app.load_latest()
    assert app.session.canvas.get(3, 3) == (0, 0, 0, 255)


def test_app_render_runs_headless(app):
    app.handle_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_6, mod=0))
    app.handle_event(_canvas_event(app, pygame.MOUSEBUTTONDOWN, 40, 30))
    app.handle_event(_canvas_event(app, pygame.MOUSEMOTION, 50, 30))
    app._render()
    assert not app.dirty
