from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from easel.tools import Tool


class HostBinding:
    """Callbacks the paint session makes into the surrounding application.

    Every method is a no-op here; hosts override the ones they care about.
    """

    def notify_pointer_moved(self, x: int, y: int) -> None:
        pass

    def notify_unsaved(self) -> None:
        pass

    def notify_foreground_changed(self) -> None:
        pass

    def notify_background_changed(self) -> None:
        pass

    def request_cursor_for(self, tool: "Tool") -> None:
        pass
