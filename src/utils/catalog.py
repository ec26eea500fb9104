from typing import List, Sequence

from db.models import Product


def all_products(products: Sequence[Product]) -> List[Product]:
    return list(products)


def filter_by_category(products: Sequence[Product], category: str) -> List[Product]:
    return [p for p in products if p.category == category]


def filter_by_name_contains(products: Sequence[Product], substring: str) -> List[Product]:
    """
    Case-insensitive substring match over product names.
    A blank query shows the whole catalog again.
    """
    needle = (substring or "").strip().lower()
    if not needle:
        return all_products(products)
    return [p for p in products if needle in p.name.lower()]


def categories(products: Sequence[Product]) -> List[str]:
    """Distinct categories, in the order they first appear."""
    seen: List[str] = []
    for p in products:
        if p.category and p.category not in seen:
            seen.append(p.category)
    return seen
