from __future__ import annotations

from typing import Any, Optional

from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select, TextArea

from db.errors import ValidationError
from db.models import ROLE_ADMIN, ROLE_CUSTOMER, Order, Product, User
from utils import forms


class FormModal(ModalScreen[Optional[Any]]):
    """
    Base of the admin forms. Dismissed with the validated record on save,
    None on cancel. Validation errors keep the form open and populated.
    """

    title_text = ""

    def compose(self) -> ComposeResult:
        with Vertical(id="div-form"):
            yield Label(self.title_text, id="label-form-title")
            yield from self.compose_fields()
            yield Label("", id="label-form-error")
            with Horizontal(id="div-form-btns"):
                yield Button("Cancelar", id="btn-cancel")
                yield Button("Guardar", id="btn-save", variant="primary")

    def compose_fields(self) -> ComposeResult:
        raise NotImplementedError

    def build(self) -> Any:
        raise NotImplementedError

    def value_of(self, selector: str) -> str:
        return self.query_one(selector, Input).value

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(None)

    @on(Button.Pressed, "#btn-save")
    def handle_save(self) -> None:
        try:
            record = self.build()
        except ValidationError as exc:
            self.query_one("#label-form-error", Label).update(str(exc))
            return
        self.dismiss(record)

    @on(Button.Pressed, "#btn-cancel")
    def handle_cancel(self) -> None:
        self.dismiss(None)


class UserFormModal(FormModal):
    def __init__(self, user: Optional[User] = None) -> None:
        super().__init__()
        self._user = user
        self.title_text = "Editar usuario" if user else "Nuevo usuario"

    def compose_fields(self) -> ComposeResult:
        user = self._user
        yield Label("Usuario")
        yield Input(user.name if user else "", id="input-user-name")
        yield Label("Contraseña")
        yield Input(user.pwd if user else "", id="input-user-pwd", password=True)
        yield Label("Tipo")
        yield Select(
            [("Cliente", ROLE_CUSTOMER), ("Administrador", ROLE_ADMIN)],
            value=user.role if user and user.role == ROLE_ADMIN else ROLE_CUSTOMER,
            allow_blank=False,
            id="select-user-role",
        )

    def build(self) -> User:
        return forms.user_form(
            self.value_of("#input-user-name"),
            self.value_of("#input-user-pwd"),
            self.query_one("#select-user-role", Select).value,
            uid=self._user.uid if self._user else None,
        )


class ProductFormModal(FormModal):
    def __init__(self, product: Optional[Product] = None) -> None:
        super().__init__()
        self._product = product
        self.title_text = "Editar producto" if product else "Nuevo producto"

    def compose_fields(self) -> ComposeResult:
        p = self._product
        yield Label("Nombre")
        yield Input(p.name if p else "", id="input-prod-name")
        yield Label("Stock")
        yield Input(str(p.stock) if p else "", id="input-prod-stock", type="integer")
        yield Label("Precio (€)")
        yield Input(f"{p.price:.2f}" if p else "", id="input-prod-price", type="number")
        yield Label("Categoría")
        yield Input(p.category if p else "", id="input-prod-category")
        yield Label("Fotos (separadas por comas)")
        yield Input(", ".join(p.photos) if p else "", id="input-prod-photos")

    def build(self) -> Product:
        return forms.product_form(
            self.value_of("#input-prod-name"),
            self.value_of("#input-prod-stock"),
            self.value_of("#input-prod-price"),
            self.value_of("#input-prod-category"),
            self.value_of("#input-prod-photos"),
            pid=self._product.pid if self._product else None,
        )


class OrderFormModal(FormModal):
    title_text = "Editar pedido"

    def __init__(self, order: Order) -> None:
        super().__init__()
        self._order = order

    def compose_fields(self) -> ComposeResult:
        o = self._order
        yield Label(f"Pedido n.º {o.oid}")
        yield Label("Fecha")
        yield Input(o.order_date, id="input-order-date")
        yield Label("Precio total (€)")
        yield Input(f"{o.total_price:.2f}", id="input-order-total", type="number")
        yield Label("Descripción")
        yield TextArea(o.description, id="textarea-order-descr")

    def build(self) -> Order:
        return forms.order_form(
            self.value_of("#input-order-date"),
            self.value_of("#input-order-total"),
            self.query_one("#textarea-order-descr", TextArea).text,
            self._order.line_items,
            oid=self._order.oid,
        )
