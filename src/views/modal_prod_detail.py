from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, MarkdownViewer

from db.models import Product
from utils.pure import format_price, generate_markdown_table


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail with "add to cart".
    Returns True if the cart changed, False if not.
    """

    def __init__(self, product: Product) -> None:
        super().__init__()
        self._prod = product
        self._in_cart = 0

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical(id="vert-prod-actions"):
                yield Button("Volver", id="btn-quit")
                yield Button("Añadir al carrito", id="btn-addcart", variant="primary")

    async def on_mount(self):
        prod = self._prod
        table_rows = [
            ["Nombre", prod.name],
            ["Categoría", prod.category],
            ["Precio", format_price(prod.price)],
            ["Stock", prod.stock],
        ]
        md = f"### {prod.name}\n\n" + generate_markdown_table(
            ["Atributo", "Valor"], table_rows, ["l", "l"]
        )
        if prod.photos:
            md += "\n\n#### Fotos\n\n" + "\n".join(f"- {p}" for p in prod.photos)
        await self.query_one(MarkdownViewer).document.update(md)

        # one cart entry per unit, so the stock caps how often it can be added
        self._in_cart = sum(1 for p in self.app.router.session.cart if p.name == prod.name)
        self._refresh_button()
        self.query_one("#btn-addcart").focus()

    def _refresh_button(self) -> None:
        order_btn = self.query_one("#btn-addcart", Button)
        if self._in_cart >= self._prod.stock:
            order_btn.label = "Agotado"
            order_btn.disabled = True
            order_btn.variant = "warning"
        elif self._in_cart:
            order_btn.label = f"Añadir al carrito ({self._in_cart} en el carrito)"

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self):
        self.app.router.session.add_to_cart(self._prod)
        self.app.notify(f"{self._prod.name} añadido al carrito.")
        self.dismiss(True)
