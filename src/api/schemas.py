"""
Request bodies of the REST api.

Field names are the wire names (and database columns) used by the
storefront: usuario/pwd/tipo, nombre/stock/precio/fotos/categoria,
fechaPedido/precioTotal/descripcion/productos.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from db.models import Order, Product, User


# -----------------------------
# Users
# -----------------------------
class UserIn(BaseModel):
    usuario: str = Field(..., min_length=1)
    pwd: str = Field(..., min_length=1)
    tipo: str = Field(..., min_length=1)

    def to_model(self, uid: Optional[int] = None) -> User:
        return User(uid=uid, name=self.usuario, pwd=self.pwd, role=self.tipo)


# -----------------------------
# Catalog
# -----------------------------
class ProductIn(BaseModel):
    nombre: str = Field(..., min_length=1)
    stock: int = Field(..., ge=0)
    precio: float = Field(..., ge=0)
    fotos: List[str] = []
    categoria: str = Field(..., min_length=1)


class ProductPatch(BaseModel):
    """Either {stock} alone or any subset of the product fields."""

    nombre: Optional[str] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    precio: Optional[float] = Field(None, ge=0)
    fotos: Optional[List[str]] = None
    categoria: Optional[str] = Field(None, min_length=1)

    def changes(self) -> dict:
        return {
            "name": self.nombre,
            "stock": self.stock,
            "price": self.precio,
            "photos": self.fotos,
            "category": self.categoria,
        }


class StockUpdate(BaseModel):
    nombre: str = Field(..., min_length=1)
    stock: int = Field(..., ge=0)


# -----------------------------
# Orders / Checkout
# -----------------------------
class LineItem(BaseModel):
    """Snapshot of a product at purchase time, not a live reference."""

    id: Optional[int] = None
    nombre: str
    stock: int = 0
    precio: float = Field(..., ge=0)
    fotos: List[str] = []
    categoria: str = ""

    def to_model(self) -> Product:
        return Product(
            pid=self.id,
            name=self.nombre,
            stock=self.stock,
            price=self.precio,
            photos=list(self.fotos),
            category=self.categoria,
        )


class OrderIn(BaseModel):
    fechaPedido: str = Field(..., min_length=1)
    precioTotal: float = Field(..., ge=0)
    descripcion: str = ""
    productos: List[LineItem] = []

    def to_model(self, oid: Optional[int] = None) -> Order:
        return Order(
            oid=oid,
            order_date=self.fechaPedido,
            total_price=self.precioTotal,
            description=self.descripcion,
            line_items=[item.to_model() for item in self.productos],
        )


class CheckoutIn(BaseModel):
    productos: List[LineItem]

    def cart(self) -> List[Product]:
        return [item.to_model() for item in self.productos]
