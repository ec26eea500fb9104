from typing import Literal

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Label

from utils.messages import QuitRequestedMessage

Tone = Literal["default", "positive", "warning", "error"]
Variant = Literal["primary", "default", "success", "warning", "error"]

# (confirm button, cancel button) per tone
BUTTON_VARIANTS: dict[str, tuple[Variant, Variant]] = {
    "default": ("primary", "default"),
    "positive": ("success", "default"),
    "warning": ("warning", "default"),
    "error": ("error", "primary"),
}


class DialogModal(ModalScreen[bool]):
    """
    Question or notice box. Dismissed with True on the confirm button,
    False on cancel or escape.
    """

    BINDINGS = [Binding("escape", "cancel", "Cancelar", show=False)]

    def __init__(
        self,
        caption: str,
        confirm_text: str = "OK",
        cancel_text: str = "",
        tone: Tone = "default",
    ):
        super().__init__()
        self.caption = caption
        self.confirm_text = confirm_text
        self.cancel_text = cancel_text
        self.tone = tone

    def compose(self) -> ComposeResult:
        confirm_variant, cancel_variant = BUTTON_VARIANTS[self.tone]
        with Container(id="div-dialog"):
            yield Label(self.caption, id="caption")
            with Horizontal(id="dialog"):
                if self.cancel_text:
                    yield Button(self.cancel_text, variant=cancel_variant, id="btn-cancel")
                yield Button(self.confirm_text, variant=confirm_variant, id="btn-confirm")

    def on_mount(self):
        # destructive questions default to "No"
        if self.cancel_text and self.tone == "error":
            self.query_one("#btn-cancel").focus()
        else:
            self.query_one("#btn-confirm").focus()

    def action_cancel(self) -> None:
        self.dismiss(False)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "btn-confirm")


class AlertModal(DialogModal):
    """Blocking notice with a single OK button."""

    def __init__(self, caption: str, error: bool = False):
        super().__init__(caption, tone="error" if error else "default")


class ConfirmModal(DialogModal):
    """Yes/No question; pass destructive=True for deletes."""

    def __init__(self, question: str, confirm_text: str = "Sí", destructive: bool = False):
        cancel_text = "Cancelar" if destructive else "No"
        super().__init__(
            question, confirm_text, cancel_text, "error" if destructive else "warning"
        )


class QuitDialogModal(ConfirmModal):
    def __init__(self):
        super().__init__("¿Seguro que quieres salir?", destructive=True)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-confirm":
            self.post_message(QuitRequestedMessage())
        super().on_button_pressed(event)
