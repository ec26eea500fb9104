# client-side validation of the admin console forms
from __future__ import annotations

from typing import List, Optional, Sequence

from db.errors import ValidationError
from db.models import ROLES, Order, Product, User

EMPTY_FIELDS = "Los campos no pueden estar vacíos."


def _parse_int(raw: str, label: str) -> int:
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{label} debe ser un número entero.")
    if value < 0:
        raise ValidationError(f"{label} no puede ser negativo.")
    return value


def _parse_float(raw: str, label: str) -> float:
    try:
        value = float(raw.strip().replace(",", "."))
    except (TypeError, ValueError):
        raise ValidationError(f"{label} debe ser un número.")
    if value < 0:
        raise ValidationError(f"{label} no puede ser negativo.")
    return value


def parse_photos(raw: str) -> List[str]:
    """Comma separated image references, order kept, blanks dropped."""
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


def user_form(name: str, pwd: str, role: str, uid: Optional[int] = None) -> User:
    name = (name or "").strip()
    if not name or not (pwd or "").strip():
        raise ValidationError(EMPTY_FIELDS)
    if role not in ROLES:
        raise ValidationError(f"El tipo debe ser uno de: {', '.join(ROLES)}.")
    return User(uid=uid, name=name, pwd=pwd, role=role)


def product_form(
    name: str,
    stock: str,
    price: str,
    category: str,
    photos: str = "",
    pid: Optional[int] = None,
) -> Product:
    name = (name or "").strip()
    category = (category or "").strip().lower()
    if not name or not (stock or "").strip() or not (price or "").strip() or not category:
        raise ValidationError(EMPTY_FIELDS)
    return Product(
        pid=pid,
        name=name,
        stock=_parse_int(stock, "El stock"),
        price=_parse_float(price, "El precio"),
        photos=parse_photos(photos),
        category=category,
    )


def order_form(
    order_date: str,
    total_price: str,
    description: str,
    line_items: Sequence[Product] = (),
    oid: Optional[int] = None,
) -> Order:
    """Line items are not editable from the form, they are carried over."""
    order_date = (order_date or "").strip()
    if not order_date or not (total_price or "").strip():
        raise ValidationError(EMPTY_FIELDS)
    return Order(
        oid=oid,
        order_date=order_date,
        total_price=_parse_float(total_price, "El precio total"),
        description=description or "",
        line_items=list(line_items),
    )
