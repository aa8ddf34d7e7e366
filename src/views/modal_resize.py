from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Resize
from textual.screen import ModalScreen
from textual.widgets import Label


class ResizeScreenPromptModal(ModalScreen[bool]):
    """
    Covers the app until the terminal is at least min_width x min_height.
    """

    def __init__(self, min_width: int = 60, min_height: int = 20) -> None:
        super().__init__()
        self.min_width = min_width
        self.min_height = min_height

    def compose(self) -> ComposeResult:
        with Container(id="div-resize"):
            yield Label(
                f"The storefront needs at least {self.min_width}x{self.min_height}.",
                id="prompt",
            )
            yield Label("", id="label-current-size")

    def on_mount(self) -> None:
        self._show_size(self.app.size.width, self.app.size.height)

    def _show_size(self, width: int, height: int) -> None:
        self.query_one("#label-current-size", Label).update(
            f"Current size: {width}x{height}"
        )

    def on_resize(self, event: Resize) -> None:
        width, height = event.size.width, event.size.height
        if width >= self.min_width and height >= self.min_height:
            self.dismiss(True)
            return
        self._show_size(width, height)
