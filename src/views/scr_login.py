from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label

from db.errors import LoginError
from views.base_screen import BaseScreen
from views.modal_dialog import QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Dismissed once the router holds a session.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Iniciar sesión", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="div-login"):
            yield Label("Usuario")
            yield Input(placeholder="cliente", id="input-login-user")
            yield Label("Contraseña")
            yield Input(placeholder="*********", password=True, id="input-login-pwd")
            yield Label("", id="label-login-error")
            with Horizontal(id="div-login-btns"):
                yield Button("Salir", id="btn-quit")
                yield Button("Entrar", id="btn-login", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-user").focus()

    def on_key(self, event: Key) -> None:
        if event.key == "enter" and self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        name = self.query_one("#input-login-user", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value
        error_label = self.query_one("#label-login-error", Label)

        if not name or not pwd:
            error_label.update("¡Usuario o contraseña vacíos!")
            return

        # credentials are checked against the public user list
        users = await self.app.call_api(self.app.api.list_users)
        if users is None:
            return

        try:
            session = self.app.router.login(users, name, pwd)
        except LoginError as exc:
            error_label.update(str(exc))
            input_login_pwd = self.query_one("#input-login-pwd", Input)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return

        self.notify(f"¡Hola, {session.user.name}!")
        self.dismiss()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
