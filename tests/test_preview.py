import pygame

from easel.canvas import Canvas
from easel.geometry import covered_pixels, sample_point, thick_segment
from easel.preview import compose, frame_size, pending_preview
from easel.tools import EventKind, PaintSession, PointerEvent, Tool


RED = (220, 30, 30, 255)


def _session(tool, size=0):
    return PaintSession(Canvas(30, 20), tool=tool, brush_size=size, foreground=RED, antialias=False)


def _target(session):
    target = pygame.Surface(frame_size(session.canvas.width, session.canvas.height))
    target.fill((90, 90, 90))
    return target


def _rgb(surface, x, y):
    return tuple(surface.get_at((x, y)))[:3]


def test_frame_size_adds_border():
    assert frame_size(30, 20) == (35, 25)


def test_compose_shows_canvas_and_border():
    session = _session(Tool.PENCIL)
    session.handle(PointerEvent(EventKind.PRESS, 4, 4))
    target = _target(session)
    compose(session, target)

    assert _rgb(target, 4, 4) == RED[:3]
    assert _rgb(target, 0, 0) == (255, 255, 255)
    assert _rgb(target, 0, 20) == (0, 0, 0)
    assert _rgb(target, 0, 21) == (63, 63, 63)
    assert _rgb(target, 34, 0) == (252, 252, 252)
    assert _rgb(target, 33, 23) == (189, 189, 189)


def test_compose_respects_origin():
    session = _session(Tool.PENCIL)
    session.handle(PointerEvent(EventKind.PRESS, 0, 0))
    target = pygame.Surface((50, 40))
    compose(session, target, origin=(10, 7))
    assert _rgb(target, 10, 7) == RED[:3]
    assert _rgb(target, 11, 7) == (255, 255, 255)


def test_line_preview_overlays_without_committing():
    session = _session(Tool.LINE)
    session.handle(PointerEvent(EventKind.PRESS, 2, 2))
    session.handle(PointerEvent(EventKind.MOVE, 12, 2))

    shape, color = pending_preview(session)
    assert color == RED
    target = _target(session)
    compose(session, target)

    for x, y in covered_pixels(thick_segment(sample_point(2, 2), sample_point(12, 2), 0.5)):
        assert _rgb(target, x, y) == RED[:3]
        assert session.canvas.get(x, y) == (255, 255, 255, 255)


def test_preview_follows_pointer_and_foreground():
    session = _session(Tool.CIRCLE, size=1)
    session.handle(PointerEvent(EventKind.PRESS, 15, 10))
    session.handle(PointerEvent(EventKind.MOVE, 20, 10))
    first, _ = pending_preview(session)
    session.handle(PointerEvent(EventKind.MOVE, 22, 10))
    second, _ = pending_preview(session)
    assert first.radius == 5.0
    assert second.radius == 7.0

    session.set_foreground((0, 0, 255))
    assert pending_preview(session)[1] == (0, 0, 255, 255)


def test_tool_switch_removes_circle_overlay():
    session = _session(Tool.CIRCLE, size=2)
    before = session.canvas_snapshot().surface
    session.handle(PointerEvent(EventKind.PRESS, 15, 10))
    session.handle(PointerEvent(EventKind.MOVE, 22, 14))
    session.set_tool(Tool.AIRBRUSH)

    assert pending_preview(session) is None
    target = _target(session)
    compose(session, target)
    for x in range(30):
        for y in range(20):
            assert _rgb(target, x, y) == tuple(before.get_at((x, y)))[:3]
            assert session.canvas.get(x, y) == tuple(before.get_at((x, y)))
