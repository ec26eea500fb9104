from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from db.errors import EmptyCartError, OutOfStockError
from db.models import Order, Product

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CheckoutPlan:
    """
    Everything a checkout writes, computed before touching the store.

    Fields:
      - order: the order to insert (no id yet)
      - decrements: units bought per product name, only for names that exist
      - new_stock: stock each affected product ends up with
    """

    order: Order
    decrements: Dict[str, int]
    new_stock: Dict[str, int]


def cart_total(cart: Sequence[Product]) -> float:
    """Decimal sum of the cart prices, rounded to cents."""
    total = sum((Decimal(str(p.price)) for p in cart), Decimal("0"))
    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def decrement_map(
    cart: Sequence[Product], products: Sequence[Product]
) -> Dict[str, int]:
    """
    Count cart occurrences per product name. Names missing from the current
    product list are dropped, the cart snapshot may be stale.
    """
    known = {p.name for p in products}
    counts = Counter(item.name for item in cart)
    return {name: qty for name, qty in counts.items() if name in known}


def plan_checkout(
    cart: Sequence[Product],
    products: Sequence[Product],
    when: Optional[date] = None,
) -> CheckoutPlan:
    if not cart:
        raise EmptyCartError()

    decrements = decrement_map(cart, products)
    stock_by_name = {p.name: p.stock for p in products}
    new_stock = {name: stock_by_name[name] - qty for name, qty in decrements.items()}

    shortages = {name: stock for name, stock in new_stock.items() if stock < 0}
    if shortages:
        raise OutOfStockError(shortages)

    when = when or date.today()
    line_items: List[Product] = list(cart)
    order = Order(
        oid=None,
        order_date=when.isoformat(),
        total_price=cart_total(cart),
        description="\n".join(item.name for item in cart),
        line_items=line_items,
    )
    return CheckoutPlan(order=order, decrements=decrements, new_stock=new_stock)
