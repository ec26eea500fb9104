from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Label, Rule

from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_dialog import ConfirmModal


class CartScreen(BaseScreen):
    """
    Session cart: one row per unit added, remove with confirmation, checkout.
    """

    def __init__(self) -> None:
        super().__init__()
        self.configure(header_sub_title="Carrito")

    def compose(self) -> ComposeResult:
        yield from super().compose()
        yield DataTable(id="table-cart")
        yield Label("Total del carrito: 0.00 €", id="label-cart-total")
        yield Rule(line_style="dashed")
        with Horizontal(id="hort-buttons"):
            yield Button("Atrás", id="btn-back")
            yield Button("Quitar artículo", id="btn-remove")
            yield Button("Finalizar compra", id="btn-checkout", variant="primary")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("#", "Producto", "Categoría", "Precio")
        self.render_cart()

    def render_cart(self) -> None:
        cart = self.session.cart
        table = self.query_one(DataTable)
        table.clear()
        for idx, item in enumerate(cart, start=1):
            table.add_row(idx, item.name, item.category, format_price(item.price))

        if not cart:
            table.add_class("no-items")
        else:
            table.remove_class("no-items")
        self.query_one("#label-cart-total", Label).update(
            f"Total del carrito: {format_price(self.session.cart_total())}"
        )

    @on(Button.Pressed, "#btn-back")
    def handle_back(self) -> None:
        self.app.show("catalog")

    @on(Button.Pressed, "#btn-remove")
    @work()
    async def handle_remove_item(self):
        cart = self.session.cart
        if not cart:
            self.app.notify("El carrito está vacío.", severity="warning")
            return

        index = self.query_one(DataTable).cursor_row
        remove_confirmed = await self.app.push_screen_wait(
            ConfirmModal(
                f"¿Quitar {cart[index].name} del carrito?"
            )
        )
        if remove_confirmed:
            self.session.remove_from_cart(index)
            self.render_cart()
            self.notify("Artículo quitado del carrito.", severity="information")

    @on(Button.Pressed, "#btn-checkout")
    @work()
    async def handle_checkout(self) -> None:
        if not self.session.cart:
            self.app.notify("El carrito está vacío.", severity="warning")
            return

        if await self.app.push_screen_wait(CheckoutModal()):
            self.app.show("catalog")
        else:
            self.render_cart()
