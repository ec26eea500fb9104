from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from utils.pure import format_price, generate_markdown_table
from views.modal_dialog import AlertModal


class CheckoutModal(ModalScreen[bool]):
    """
    Order summary of the session cart and the "place order" action.
    Return True when the order was stored, False otherwise (cart untouched).
    """

    def compose(self) -> ComposeResult:
        with Vertical():
            yield MarkdownViewer("", show_table_of_contents=False)
            with Horizontal():
                yield Button("Volver", id="btn-quit")
                yield Button("Realizar pedido", id="btn-submit", variant="primary")

    async def on_mount(self):
        session = self.app.router.session

        # cart holds one entry per unit, group them for the summary
        lines = {}
        for item in session.cart:
            qty, price = lines.get(item.name, (0, item.price))
            lines[item.name] = (qty + 1, price)
        rows = [
            [name, format_price(price), qty, format_price(price * qty)]
            for name, (qty, price) in lines.items()
        ]
        md = "### Resumen del pedido\n\n" + generate_markdown_table(
            ["Producto", "Precio unitario", "Cantidad", "Precio total"],
            rows,
            ["l", "c", "c", "c"],
        )
        md += f"\n\n**Total:** {format_price(session.cart_total())}"
        await self.query_one(MarkdownViewer).document.update(md)
        self.query_one("#btn-submit").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        session = self.app.router.session
        result = await self.app.call_api(self.app.api.checkout, list(session.cart))
        if result is None:
            self.dismiss(False)
            return

        order_id, total = result
        session.clear_cart()
        # stock and orders changed server side, re-read them
        await self.app.refresh_products()
        await self.app.refresh_orders()
        await self.app.push_screen_wait(
            AlertModal(f"¡Pedido realizado!\n\nPedido n.º {order_id}\nTotal: {format_price(total)}")
        )
        self.dismiss(True)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)
