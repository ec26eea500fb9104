from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from db.errors import LoginError
from db.models import ROLE_ADMIN, ROLE_CUSTOMER, ROLES, Product, User
from utils.checkout import cart_total

LOGIN = "login"
CATALOG = "catalog"
DETAIL = "detail"
CART = "cart"
ADMIN = "admin"
USER_MANAGEMENT = "userManagement"
PRODUCT_MANAGEMENT = "productManagement"
ORDER_MANAGEMENT = "orderManagement"

VIEWS = (
    LOGIN,
    CATALOG,
    DETAIL,
    CART,
    ADMIN,
    USER_MANAGEMENT,
    PRODUCT_MANAGEMENT,
    ORDER_MANAGEMENT,
)

# "back" from each screen; top-level screens have none
PARENT_VIEW: Dict[str, Optional[str]] = {
    LOGIN: None,
    CATALOG: None,
    ADMIN: None,
    DETAIL: CATALOG,
    CART: CATALOG,
    USER_MANAGEMENT: ADMIN,
    PRODUCT_MANAGEMENT: ADMIN,
    ORDER_MANAGEMENT: ADMIN,
}

# forward transitions, logout and back are handled separately
TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    LOGIN: (),
    CATALOG: (DETAIL, CART),
    DETAIL: (CART,),
    CART: (),
    ADMIN: (USER_MANAGEMENT, PRODUCT_MANAGEMENT, ORDER_MANAGEMENT),
    USER_MANAGEMENT: (),
    PRODUCT_MANAGEMENT: (),
    ORDER_MANAGEMENT: (),
}

HOME_VIEW = {ROLE_ADMIN: ADMIN, ROLE_CUSTOMER: CATALOG}


def authenticate(users: Sequence[User], name: str, pwd: str) -> User:
    """
    Plaintext credential lookup over the user list fetched from the api.
    A matching user whose role is neither admin nor cliente is rejected too.
    """
    found = next((u for u in users if u.name == name and u.pwd == pwd), None)
    if found is None:
        raise LoginError("Contraseña o nombre de usuario incorrecto")
    if found.role not in ROLES:
        raise LoginError("Tipo de usuario no válido")
    return found


@dataclass
class Session:
    """
    Per-login state. Created by Session.start at login, emptied by end() at
    logout; nothing here outlives the session.

    Fields:
      - user: the logged-in identity
      - cart: product snapshots, one entry per "add to cart", duplicates allowed
      - selected_product: product shown in the detail view
      - selected_user: user picked in user management
    """

    user: User
    cart: List[Product] = field(default_factory=list)
    selected_product: Optional[Product] = None
    selected_user: Optional[User] = None
    active: bool = True

    @classmethod
    def start(cls, user: User) -> Session:
        if user.role not in ROLES:
            raise LoginError("Tipo de usuario no válido")
        return cls(user=user)

    @property
    def is_admin(self) -> bool:
        return self.user.role == ROLE_ADMIN

    def add_to_cart(self, product: Product) -> None:
        self.cart.append(product)

    def remove_from_cart(self, index: int) -> Product:
        return self.cart.pop(index)

    def clear_cart(self) -> None:
        self.cart.clear()

    def cart_total(self) -> float:
        return cart_total(self.cart)

    def end(self) -> None:
        self.cart.clear()
        self.selected_product = None
        self.selected_user = None
        self.active = False


class ViewRouter:
    """
    Selects the visible screen and owns the session between login and logout.
    """

    def __init__(self) -> None:
        self.view: str = LOGIN
        self.session: Optional[Session] = None

    def login(self, users: Sequence[User], name: str, pwd: str) -> Session:
        """Authenticate, open a session and move to the role's home view."""
        if self.session is not None:
            self.logout()
        user = authenticate(users, name, pwd)
        self.session = Session.start(user)
        self.view = HOME_VIEW[user.role]
        return self.session

    def navigate(self, view: str) -> str:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        if self.session is None:
            raise ValueError("No active session.")
        if view not in TRANSITIONS[self.view]:
            raise ValueError(f"Cannot go from {self.view} to {view}.")
        self.view = view
        return view

    def back(self) -> str:
        parent = PARENT_VIEW[self.view]
        if parent is None:
            raise ValueError(f"{self.view} has no parent view.")
        if self.view == DETAIL and self.session is not None:
            self.session.selected_product = None
        if self.view == USER_MANAGEMENT and self.session is not None:
            self.session.selected_user = None
        self.view = parent
        return parent

    def go(self, view: str) -> str:
        """
        Menu jump: a forward transition, the parent, or a sibling reached
        through the parent (e.g. userManagement -> productManagement).
        """
        if view == self.view:
            return view
        if view in TRANSITIONS[self.view]:
            return self.navigate(view)
        parent = PARENT_VIEW[self.view]
        if parent is not None and (view == parent or view in TRANSITIONS[parent]):
            self.back()
            return self.view if view == parent else self.navigate(view)
        raise ValueError(f"Cannot go from {self.view} to {view}.")

    def logout(self) -> None:
        """Clears cart and identity unconditionally, from any view."""
        if self.session is not None:
            self.session.end()
        self.session = None
        self.view = LOGIN
