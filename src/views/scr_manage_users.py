from textual import on, work
from textual.widgets import Button, DataTable

from db.models import User
from views.base_manage import ManageScreen
from views.modal_forms import UserFormModal


class UserManagementScreen(ManageScreen):
    """
    Users are addressed by id. Edit/Delete act on the selected row.
    """

    COLUMNS = ("ID", "Usuario", "Contraseña", "Tipo")

    def __init__(self) -> None:
        super().__init__("Gestión de usuarios")

    async def fetch(self):
        return await self.app.call_api(self.app.api.list_users)

    def row(self, user: User):
        return (user.uid, user.name, "*" * len(user.pwd), user.role)

    def describe(self, user: User) -> str:
        return f"el usuario {user.name}"

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        if self.session is not None:
            self.session.selected_user = self.selected()

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True)
    async def handle_new(self) -> None:
        user = await self.app.push_screen_wait(UserFormModal())
        if user is None:
            return
        created = await self.app.call_api(self.app.api.create_user, user)
        await self.report(created, f"Usuario {user.name} guardado.")

    @on(Button.Pressed, "#btn-edit")
    @work(exclusive=True)
    async def handle_edit(self) -> None:
        selected = await self.require_selection()
        if selected is None:
            return
        user = await self.app.push_screen_wait(UserFormModal(selected))
        if user is None:
            return
        changes = await self.app.call_api(self.app.api.update_user, selected.uid, user)
        await self.report(changes, f"Usuario {user.name} guardado.")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        selected = await self.require_selection()
        if selected is None or not await self.confirm_delete(selected):
            return
        if self.session is not None and selected.uid == self.session.user.uid:
            self.notify("Estás eliminando tu propia cuenta.", severity="warning")
        changes = await self.app.call_api(self.app.api.delete_user, selected.uid)
        await self.report(changes, f"Usuario {selected.name} eliminado.")
