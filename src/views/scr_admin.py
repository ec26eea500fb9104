from textual import on, work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Button, MarkdownViewer

from utils.pure import format_price
from views.base_screen import BaseScreen


class AdminScreen(BaseScreen):
    """
    Admin panel: store overview plus entries to the three management screens.
    """

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Panel de administración")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical(id="vert-admin"):
            yield MarkdownViewer(id="md-admin", show_table_of_contents=False)
            yield Button("Gestionar pedidos", id="btn-orderManagement", variant="primary")
            yield Button("Gestionar usuarios", id="btn-userManagement", variant="primary")
            yield Button("Gestionar productos", id="btn-productManagement", variant="primary")

    def on_mount(self) -> None:
        self.handle_reload()

    @work(exclusive=True)
    async def handle_reload(self) -> None:
        products = await self.app.refresh_products()
        orders = await self.app.refresh_orders()
        if products is None or orders is None:
            return
        out_of_stock = [p.name for p in products if p.stock == 0]
        md = (
            "### Resumen de la tienda\n\n"
            f"- Productos: {len(products)}\n"
            f"- Unidades en stock: {sum(p.stock for p in products)}\n"
            f"- Agotados: {', '.join(out_of_stock) or '-'}\n"
            f"- Pedidos: {len(orders)}\n"
            f"- Ventas: {format_price(sum(o.total_price for o in orders))}\n"
        )
        await self.query_one("#md-admin", MarkdownViewer).document.update(md)

    @on(Button.Pressed)
    def handle_menu(self, event: Button.Pressed) -> None:
        btn_id = event.button.id or ""
        if btn_id.startswith("btn-") and btn_id.endswith("Management"):
            self.app.show(btn_id.removeprefix("btn-"))
