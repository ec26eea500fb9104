from typing import Any, List, Optional, Sequence

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable

from views.base_screen import BaseScreen
from views.modal_dialog import AlertModal, ConfirmModal


class ManageScreen(BaseScreen):
    """
    List + CRUD buttons shared by the admin management screens.

    Subclasses set COLUMNS and implement fetch/row/describe, and the
    create/edit/delete handlers. After every write the list is fetched
    again from the api, local copies are never patched.
    """

    COLUMNS: Sequence[str] = ()
    BUTTONS: Sequence[tuple] = (
        ("Nuevo", "btn-new", "success"),
        ("Editar", "btn-edit", "primary"),
        ("Eliminar", "btn-delete", "error"),
    )

    def __init__(self, sub_title: str) -> None:
        super().__init__()
        self.configure(header_sub_title=sub_title)
        self.records: List[Any] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-records")
        with Horizontal(id="hort-table-control"):
            yield Button("Atrás", id="btn-back")
            yield Button("Recargar", id="btn-refresh")
            for label, btn_id, variant in self.BUTTONS:
                yield Button(label, id=btn_id, variant=variant)

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns(*self.COLUMNS)
        self.reload()

    async def fetch(self) -> Optional[List[Any]]:
        raise NotImplementedError

    def row(self, record: Any) -> Sequence[Any]:
        raise NotImplementedError

    def describe(self, record: Any) -> str:
        raise NotImplementedError

    @on(Button.Pressed, "#btn-refresh")
    @work(exclusive=True, group="reload")
    async def reload(self) -> None:
        records = await self.fetch()
        if records is None:
            return
        self.records = records
        table = self.query_one(DataTable)
        table.clear()
        for record in records:
            table.add_row(*self.row(record))

    def selected(self) -> Optional[Any]:
        table = self.query_one(DataTable)
        if not self.records or table.cursor_row is None:
            return None
        if table.cursor_row >= len(self.records):
            return None
        return self.records[table.cursor_row]

    async def require_selection(self) -> Optional[Any]:
        record = self.selected()
        if record is None:
            await self.app.push_screen_wait(
                AlertModal("Selecciona una fila de la lista.", error=True)
            )
        return record

    async def confirm_delete(self, record: Any) -> bool:
        return await self.app.push_screen_wait(
            ConfirmModal(
                f"¿Eliminar {self.describe(record)}? No se puede deshacer.",
                confirm_text="Eliminar",
                destructive=True,
            )
        )

    async def report(self, result: Optional[Any], message: str) -> None:
        """Alert the outcome of a write, then re-read the list."""
        if result is None:
            return
        if isinstance(result, int) and not isinstance(result, bool) and result == 0:
            await self.app.push_screen_wait(
                AlertModal("No se ha cambiado nada, el registro ya no existe.", error=True)
            )
        else:
            await self.app.push_screen_wait(AlertModal(message))
        self.reload()

    @on(Button.Pressed, "#btn-back")
    def handle_back(self) -> None:
        self.app.show("admin")
