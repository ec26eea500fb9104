from textual import on, work
from textual.app import ComposeResult
from textual.widgets import Button, DataTable, MarkdownViewer

from db.models import Order
from utils.pure import format_price, generate_markdown_table
from views.base_manage import ManageScreen
from views.modal_forms import OrderFormModal


class OrderManagementScreen(ManageScreen):
    """
    Orders are created by checkout only; admins edit or delete them.
    The highlighted order's line items are shown above the table.
    """

    COLUMNS = ("Pedido", "Fecha", "Artículos", "Total")
    BUTTONS = (
        ("Editar", "btn-edit", "primary"),
        ("Eliminar", "btn-delete", "error"),
    )

    def __init__(self) -> None:
        super().__init__("Gestión de pedidos")

    def compose(self) -> ComposeResult:
        yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
        yield from super().compose()

    async def fetch(self):
        return await self.app.refresh_orders()

    def row(self, o: Order):
        return (o.oid, o.order_date, len(o.line_items), format_price(o.total_price))

    def describe(self, o: Order) -> str:
        return f"el pedido n.º {o.oid}"

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self) -> None:
        self._render_detail(self.selected())

    def _render_detail(self, order) -> None:
        viewer = self.query_one("#md-order-detail", MarkdownViewer)
        if order is None:
            viewer.document.update("### Selecciona un pedido para ver el detalle.")
            return

        header = f"### Pedido n.º {order.oid}\nFecha: {order.order_date}\n\n"
        rows = [
            [item.name, item.category, format_price(item.price)]
            for item in order.line_items
        ]
        table = generate_markdown_table(
            ["Producto", "Categoría", "Precio"], rows, ["l", "l", "r"]
        )
        footer = f"\n\n**Total:** {format_price(order.total_price)}"
        viewer.document.update(header + (table or "_Sin artículos._") + footer)

    @on(Button.Pressed, "#btn-edit")
    @work(exclusive=True)
    async def handle_edit(self) -> None:
        selected = await self.require_selection()
        if selected is None:
            return
        order = await self.app.push_screen_wait(OrderFormModal(selected))
        if order is None:
            return
        changes = await self.app.call_api(self.app.api.update_order, selected.oid, order)
        await self.report(changes, f"Pedido n.º {selected.oid} guardado.")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        selected = await self.require_selection()
        if selected is None or not await self.confirm_delete(selected):
            return
        changes = await self.app.call_api(self.app.api.delete_order, selected.oid)
        await self.report(changes, f"Pedido n.º {selected.oid} eliminado.")
