from typing import List

from textual import events, on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Button, DataTable, Input, Label, Select

from db.models import Product
from utils.catalog import categories, filter_by_category, filter_by_name_contains
from utils.pure import format_price
from views.base_screen import BaseScreen
from views.modal_prod_detail import ProdDetailModal

ALL_CATEGORIES = "__all__"


class CatalogScreen(BaseScreen):
    """
    Product browsing for customers: category menu, name search, detail on enter.
    """

    # only here to be displayed in the footer
    BINDINGS = [
        Binding("enter", "noop", "Ver producto", show=True, key_display="⏎"),
    ]

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Catálogo")
        self._shown: List[Product] = []

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Horizontal(id="hort-catalog-filters"):
            yield Select(
                [("Todos los productos", ALL_CATEGORIES)],
                value=ALL_CATEGORIES,
                allow_blank=False,
                id="select-category",
            )
            yield Input(id="input-search", placeholder="Buscar por nombre...")
        yield DataTable(id="table-catalog")
        with Horizontal(id="hort-catalog-controls"):
            yield Label("", id="label-result-cnt")
            yield Button("Carrito (0)", id="btn-cart", variant="primary")

    def on_mount(self):
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Nombre", "Categoría", "Precio", "Stock")

        self.query_one("#input-search").focus()
        self.update_cart_button()
        self.reload_products()

    @work(exclusive=True)
    async def reload_products(self) -> None:
        products = await self.app.refresh_products()
        if products is None:
            return
        select = self.query_one("#select-category", Select)
        select.set_options(
            [("Todos los productos", ALL_CATEGORIES)]
            + [(c.capitalize(), c) for c in categories(products)]
        )
        self.apply_filters()

    @on(Select.Changed, "#select-category")
    def handle_category(self) -> None:
        self.apply_filters()

    @on(Input.Changed, "#input-search")
    def handle_search(self) -> None:
        self.apply_filters()

    def apply_filters(self) -> None:
        products = self.app.products
        category = self.query_one("#select-category", Select).value
        if category not in (ALL_CATEGORIES, Select.BLANK):
            products = filter_by_category(products, category)
        products = filter_by_name_contains(
            products, self.query_one("#input-search", Input).value
        )
        self._shown = products

        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(p.name, p.category, format_price(p.price), p.stock)
        self.query_one("#label-result-cnt", Label).update(
            f"{len(products)} productos"
        )

    def update_cart_button(self) -> None:
        if self.session is None:
            return
        self.query_one("#btn-cart", Button).label = f"Carrito ({len(self.session.cart)})"

    @on(Button.Pressed, "#btn-cart")
    def handle_cart(self) -> None:
        self.app.show("cart")

    @work()
    async def on_key(self, event: events.Key) -> None:
        table = self.query_one(DataTable)
        if event.key == "enter" and self.focused == table and self._shown:
            product = self._shown[table.cursor_row]
            self.app.router.navigate("detail")
            self.session.selected_product = product
            if await self.app.push_screen_wait(ProdDetailModal(product)):
                self.update_cart_button()
            self.app.router.back()
