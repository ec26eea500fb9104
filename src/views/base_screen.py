from typing import Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import Screen
from textual.widgets import Button, Footer, Header, Label, ListItem, ListView, Markdown

from utils.messages import UserLogoutMessage
from utils.pure import generate_markdown_table
from utils.session import Session
from views.modal_dialog import ConfirmModal, QuitDialogModal


class Sidebar(Container):
    def compose(self) -> ComposeResult:
        yield Label("Sesión", id="label-info-1")
        yield Markdown("", id="md-userinfo")
        yield Button("Cerrar sesión", id="btn-logout", variant="error")
        yield Label("Menú", id="label-info-2")
        yield ListView(id="list-menu")

    async def on_mount(self):
        session = self.app.router.session
        if session is None:
            return

        role = "Administrador" if session.is_admin else "Cliente"
        table_rows = [["Usuario", session.user.name], ["Tipo", role]]
        md_table_str = generate_markdown_table(None, table_rows, ["l", "l"])
        await self.query_one(Markdown).update(md_table_str)

        menu = self.app.ADMIN_VIEWS if session.is_admin else self.app.CUSTOMER_VIEWS
        list_menu: ListView = self.query_one("#list-menu")
        await list_menu.clear()
        await list_menu.extend(
            [ListItem(Label(v), id="list-menu-item-" + k) for k, v in menu.items()]
        )
        self.highlight_item(self.app.router.view)

    async def on_list_view_selected(self, event: ListView.Selected):
        selected_view = event.item.id.removeprefix("list-menu-item-")
        self.highlight_item(self.app.router.view)
        if self.app.router.view != selected_view:
            self.app.show(selected_view)

    @on(Button.Pressed, "#btn-logout")
    @work()
    async def handle_logout(self):
        if not await self.app.push_screen_wait(
            ConfirmModal("¿Seguro que quieres cerrar sesión?")
        ):
            return

        self.post_message(UserLogoutMessage())

    def highlight_item(self, view: str):
        list_menu = self.query_one("#list-menu")
        for item in list_menu.children:
            item.highlighted = item.id == "list-menu-item-" + view


class BaseScreen(Screen):
    """
    Inherited by all screens, contains common elements like
    headers, footers, sidebar, and keybindings.
    """

    BINDINGS = [
        Binding("ctrl+z", "quit", "Salir", show=True),
    ]

    def __init__(self):
        super().__init__()

        self.configure()

    def configure(
        self,
        header_sub_title: str = "",
        show_sidebar: bool = True,
    ) -> None:
        """
        configure behavior of the base screen
        """
        self.app.title = "Tienda"
        self.sub_title = header_sub_title
        self._show_sidebar = show_sidebar

    @property
    def session(self) -> Optional[Session]:
        return self.app.router.session

    def compose(self) -> ComposeResult:
        if self._show_sidebar:
            yield Sidebar()
        yield Header()
        yield Footer(show_command_palette=False)

    @work()
    async def action_quit(self):
        await self.app.push_screen_wait(QuitDialogModal())
