# provide dataclass models, plus conversion from/to the wire records
# (column names of the database are the field names of the REST api)

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "cliente"
ROLES = (ROLE_ADMIN, ROLE_CUSTOMER)


def _json_list(value) -> list:
    # sqlite keeps lists as json text, the api sends them already parsed
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return json.loads(value)
    return list(value)


@dataclass(frozen=True)
class User:
    uid: Optional[int]
    name: str
    pwd: str
    role: str  # "admin" or "cliente"

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> User:
        return cls(
            uid=rec["id"] if "id" in rec.keys() else None,
            name=rec["usuario"],
            pwd=rec["pwd"],
            role=rec["tipo"],
        )

    def as_record(self) -> Dict[str, Any]:
        rec = {"usuario": self.name, "pwd": self.pwd, "tipo": self.role}
        if self.uid is not None:
            rec["id"] = self.uid
        return rec


@dataclass(frozen=True)
class Product:
    pid: Optional[int]
    name: str
    stock: int
    price: float
    photos: List[str] = field(default_factory=list)
    category: str = ""

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> Product:
        keys = rec.keys()
        return cls(
            pid=rec["id"] if "id" in keys else None,
            name=rec["nombre"],
            stock=int(rec["stock"]),
            price=float(rec["precio"]),
            photos=_json_list(rec["fotos"] if "fotos" in keys else None),
            category=rec["categoria"] if "categoria" in keys else "",
        )

    def as_record(self) -> Dict[str, Any]:
        rec = {
            "nombre": self.name,
            "stock": self.stock,
            "precio": self.price,
            "fotos": list(self.photos),
            "categoria": self.category,
        }
        if self.pid is not None:
            rec["id"] = self.pid
        return rec


@dataclass(frozen=True)
class Order:
    oid: Optional[int]
    order_date: str  # ISO date, YYYY-MM-DD
    total_price: float
    description: str
    line_items: List[Product] = field(default_factory=list)

    @classmethod
    def from_record(cls, rec: Mapping[str, Any]) -> Order:
        keys = rec.keys()
        return cls(
            oid=rec["id"] if "id" in keys else None,
            order_date=rec["fechaPedido"],
            total_price=float(rec["precioTotal"]),
            description=rec["descripcion"] or "",
            line_items=[
                Product.from_record(item) for item in _json_list(rec["productos"])
            ],
        )

    def as_record(self) -> Dict[str, Any]:
        rec = {
            "fechaPedido": self.order_date,
            "precioTotal": self.total_price,
            "descripcion": self.description,
            "productos": [item.as_record() for item in self.line_items],
        }
        if self.oid is not None:
            rec["id"] = self.oid
        return rec
