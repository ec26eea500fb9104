# http client used by the textual storefront, one method per endpoint
from __future__ import annotations

import os
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from db.models import Order, Product, User
from utils.logger import get_logger

_logger = get_logger(__name__)

API_URL = os.getenv("TIENDA_API_URL", "http://localhost:3001")


class ApiError(Exception):
    """Non-2xx answer from the api. `message` is the server's `error` field."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class ApiClient:
    """
    No retries and no explicit timeouts; every failure reaches the caller.
    `http` is anything with a requests-style request(method, url, json=...).
    """

    def __init__(self, base_url: str = API_URL, http: Optional[Any] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http if http is not None else requests.Session()

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        resp = self._http.request(method, f"{self.base_url}{path}", json=body)
        if resp.status_code >= 400:
            try:
                message = resp.json().get("error", resp.text)
            except ValueError:
                message = resp.text
            _logger.error(f"{method} {path} -> {resp.status_code} {message}")
            raise ApiError(resp.status_code, message)
        return resp.json()

    # ---------- users ----------

    def list_users(self) -> List[User]:
        return [User.from_record(rec) for rec in self._request("GET", "/api/usuarios")]

    def create_user(self, user: User) -> User:
        rec = self._request("POST", "/api/usuarios", _without_id(user.as_record()))
        return User.from_record(rec)

    def update_user(self, uid: int, user: User) -> int:
        body = _without_id(user.as_record())
        return self._request("PUT", f"/api/usuarios/{uid}", body)["changes"]

    def delete_user(self, uid: int) -> int:
        return self._request("DELETE", f"/api/usuarios/{uid}")["changes"]

    # ---------- products ----------

    def list_products(self) -> List[Product]:
        return [
            Product.from_record(rec) for rec in self._request("GET", "/api/productos")
        ]

    def create_product(self, product: Product) -> Product:
        rec = self._request("POST", "/api/productos", _without_id(product.as_record()))
        return Product.from_record(rec)

    def update_product(self, name: str, product: Product) -> int:
        body = _without_id(product.as_record())
        return self._request("PUT", f"/api/productos/{_quote(name)}", body)["changes"]

    def set_stock(self, name: str, stock: int) -> int:
        body = {"stock": stock}
        return self._request("PUT", f"/api/productos/{_quote(name)}", body)["changes"]

    def update_stocks(self, stocks: Iterable[Tuple[str, int]]) -> None:
        body = [{"nombre": name, "stock": stock} for name, stock in stocks]
        self._request("PUT", "/api/productos", body)

    def delete_product(self, name: str) -> int:
        return self._request("DELETE", f"/api/productos/{_quote(name)}")["changes"]

    # ---------- orders ----------

    def list_orders(self) -> List[Order]:
        return [Order.from_record(rec) for rec in self._request("GET", "/api/pedidos")]

    def create_order(self, order: Order) -> int:
        return self._request("POST", "/api/pedidos", _without_id(order.as_record()))["id"]

    def update_order(self, oid: int, order: Order) -> int:
        body = _without_id(order.as_record())
        return self._request("PUT", f"/api/pedidos/{oid}", body)["changes"]

    def delete_order(self, oid: int) -> int:
        return self._request("DELETE", f"/api/pedidos/{oid}")["changes"]

    def checkout(self, cart: Sequence[Product]) -> Tuple[int, float]:
        """Place the order for `cart`; returns (order id, total price)."""
        body = {"productos": [item.as_record() for item in cart]}
        res = self._request("POST", "/api/checkout", body)
        return res["id"], res["precioTotal"]


def _quote(name: str) -> str:
    return quote(name, safe="")


def _without_id(rec: dict) -> dict:
    return {k: v for k, v in rec.items() if k != "id"}
