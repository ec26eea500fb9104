from textual import on, work
from textual.widgets import Button

from db.models import Product
from utils.pure import format_price
from views.base_manage import ManageScreen
from views.modal_forms import ProductFormModal


class ProductManagementScreen(ManageScreen):
    """
    Products are addressed by name, a rename goes through the old name.
    """

    COLUMNS = ("Nombre", "Categoría", "Precio", "Stock", "Fotos")

    def __init__(self) -> None:
        super().__init__("Gestión de productos")

    async def fetch(self):
        return await self.app.refresh_products()

    def row(self, p: Product):
        return (p.name, p.category, format_price(p.price), p.stock, len(p.photos))

    def describe(self, p: Product) -> str:
        return f"el producto {p.name}"

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True)
    async def handle_new(self) -> None:
        product = await self.app.push_screen_wait(ProductFormModal())
        if product is None:
            return
        created = await self.app.call_api(self.app.api.create_product, product)
        await self.report(created, f"Producto {product.name} guardado.")

    @on(Button.Pressed, "#btn-edit")
    @work(exclusive=True)
    async def handle_edit(self) -> None:
        selected = await self.require_selection()
        if selected is None:
            return
        product = await self.app.push_screen_wait(ProductFormModal(selected))
        if product is None:
            return
        changes = await self.app.call_api(
            self.app.api.update_product, selected.name, product
        )
        await self.report(changes, f"Producto {product.name} guardado.")

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        selected = await self.require_selection()
        if selected is None or not await self.confirm_delete(selected):
            return
        changes = await self.app.call_api(self.app.api.delete_product, selected.name)
        await self.report(changes, f"Producto {selected.name} eliminado.")
