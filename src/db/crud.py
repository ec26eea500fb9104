# src/db/crud.py
from __future__ import annotations

import json
import sqlite3
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import aiosqlite

from db import models
from db.database import connect
from db.errors import DuplicateKeyError, StoreError
from utils.checkout import plan_checkout
from utils.logger import get_logger

_logger = get_logger(__name__)

# product columns a caller may change, keyed by model field
_PRODUCT_COLUMNS = {
    "name": "nombre",
    "stock": "stock",
    "price": "precio",
    "photos": "fotos",
    "category": "categoria",
}


@asynccontextmanager
async def _store_errors():
    """Translate sqlite failures into the store's error taxonomy."""
    try:
        yield
    except sqlite3.IntegrityError as exc:
        if "UNIQUE" in str(exc):
            raise DuplicateKeyError(str(exc)) from exc
        raise StoreError(str(exc)) from exc
    except sqlite3.Error as exc:
        raise StoreError(str(exc)) from exc


async def _fetch_all(conn: aiosqlite.Connection, sql: str, params=()) -> list:
    cur = await conn.execute(sql, params)
    rows = await cur.fetchall()
    await cur.close()
    return rows


async def _fetch_one(conn: aiosqlite.Connection, sql: str, params=()):
    cur = await conn.execute(sql, params)
    row = await cur.fetchone()
    await cur.close()
    return row


async def _write(sql: str, params: Sequence[Any]) -> int:
    """Run a single auto-committed statement, return the changed-row count."""
    async with _store_errors():
        async with connect() as conn:
            cur = await conn.execute(sql, params)
            changes = cur.rowcount
            await cur.close()
            await conn.commit()
    return changes


# ---------------------------
# Users
# ---------------------------


async def count_users() -> int:
    async with _store_errors():
        async with connect() as conn:
            row = await _fetch_one(conn, "SELECT COUNT(*) FROM usuarios;")
    return int(row[0])


async def list_users() -> List[models.User]:
    async with _store_errors():
        async with connect() as conn:
            rows = await _fetch_all(
                conn, "SELECT id, usuario, pwd, tipo FROM usuarios ORDER BY id;"
            )
    return [models.User.from_record(row) for row in rows]


async def get_user(uid: int) -> Optional[models.User]:
    """Return the user for the given id, or None."""
    async with _store_errors():
        async with connect() as conn:
            row = await _fetch_one(
                conn, "SELECT id, usuario, pwd, tipo FROM usuarios WHERE id = ?;", (uid,)
            )
    return models.User.from_record(row) if row else None


async def create_user(name: str, pwd: str, role: str) -> models.User:
    """
    Insert a user and return it with its generated id.
    Raises DuplicateKeyError if the name is taken.
    """
    async with _store_errors():
        async with connect() as conn:
            cur = await conn.execute(
                "INSERT INTO usuarios(usuario, pwd, tipo) VALUES (?, ?, ?);",
                (name, pwd, role),
            )
            uid = cur.lastrowid
            await cur.close()
            await conn.commit()
    return models.User(uid=uid, name=name, pwd=pwd, role=role)


async def update_user(uid: int, name: str, pwd: str, role: str) -> int:
    return await _write(
        "UPDATE usuarios SET usuario = ?, pwd = ?, tipo = ? WHERE id = ?;",
        (name, pwd, role, uid),
    )


async def delete_user(uid: int) -> int:
    return await _write("DELETE FROM usuarios WHERE id = ?;", (uid,))


# ---------------------------
# Products (addressed by name)
# ---------------------------

_PRODUCT_SELECT = "SELECT id, nombre, stock, precio, fotos, categoria FROM productos"


async def list_products() -> List[models.Product]:
    async with _store_errors():
        async with connect() as conn:
            rows = await _fetch_all(conn, f"{_PRODUCT_SELECT} ORDER BY id;")
    return [models.Product.from_record(row) for row in rows]


async def get_product(name: str) -> Optional[models.Product]:
    async with _store_errors():
        async with connect() as conn:
            row = await _fetch_one(conn, f"{_PRODUCT_SELECT} WHERE nombre = ?;", (name,))
    return models.Product.from_record(row) if row else None


async def create_product(
    name: str,
    stock: int,
    price: float,
    photos: Iterable[str],
    category: str,
) -> models.Product:
    photos = list(photos)
    async with _store_errors():
        async with connect() as conn:
            cur = await conn.execute(
                """
                INSERT INTO productos(nombre, stock, precio, fotos, categoria)
                VALUES (?, ?, ?, ?, ?);
                """,
                (name, stock, price, json.dumps(photos), category),
            )
            pid = cur.lastrowid
            await cur.close()
            await conn.commit()
    return models.Product(
        pid=pid, name=name, stock=stock, price=price, photos=photos, category=category
    )


async def update_product(name: str, /, **fields) -> int:
    """
    Update only the provided fields of the product called `name`
    (name, stock, price, photos, category). Return the changed-row count;
    0 when nothing matched or nothing was given.
    """
    unknown = set(fields) - set(_PRODUCT_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown product fields: {sorted(unknown)}")

    assignments: List[str] = []
    params: List[Any] = []
    for key, value in fields.items():
        if value is None:
            continue
        if key == "photos":
            value = json.dumps(list(value))
        assignments.append(f"{_PRODUCT_COLUMNS[key]} = ?")
        params.append(value)

    if not assignments:
        return 0
    return await _write(
        f"UPDATE productos SET {', '.join(assignments)} WHERE nombre = ?;",
        (*params, name),
    )


async def update_stocks(stocks: Sequence[Tuple[str, int]]) -> int:
    """
    Bulk stock update [(name, stock), ...] applied in a single transaction:
    either every row is written or none is. Returns the changed-row count.
    """
    async with _store_errors():
        async with connect() as conn:
            try:
                changes = 0
                for name, stock in stocks:
                    cur = await conn.execute(
                        "UPDATE productos SET stock = ? WHERE nombre = ?;",
                        (stock, name),
                    )
                    changes += cur.rowcount
                    await cur.close()
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise
    return changes


async def delete_product(name: str) -> int:
    return await _write("DELETE FROM productos WHERE nombre = ?;", (name,))


# ---------------------------
# Orders
# ---------------------------

_ORDER_SELECT = "SELECT id, fechaPedido, precioTotal, descripcion, productos FROM pedidos"


def _line_items_json(line_items: Iterable[models.Product]) -> str:
    return json.dumps([item.as_record() for item in line_items])


async def list_orders() -> List[models.Order]:
    async with _store_errors():
        async with connect() as conn:
            rows = await _fetch_all(conn, f"{_ORDER_SELECT} ORDER BY id;")
    return [models.Order.from_record(row) for row in rows]


async def get_order(oid: int) -> Optional[models.Order]:
    async with _store_errors():
        async with connect() as conn:
            row = await _fetch_one(conn, f"{_ORDER_SELECT} WHERE id = ?;", (oid,))
    return models.Order.from_record(row) if row else None


async def _insert_order(conn: aiosqlite.Connection, order: models.Order) -> int:
    cur = await conn.execute(
        """
        INSERT INTO pedidos(fechaPedido, precioTotal, descripcion, productos)
        VALUES (?, ?, ?, ?);
        """,
        (
            order.order_date,
            order.total_price,
            order.description,
            _line_items_json(order.line_items),
        ),
    )
    oid = cur.lastrowid
    await cur.close()
    return oid


async def create_order(order: models.Order) -> models.Order:
    """Insert an order as given (no stock side effects); return it with its id."""
    async with _store_errors():
        async with connect() as conn:
            oid = await _insert_order(conn, order)
            await conn.commit()
    _logger.info(f"New order created with id {oid}")
    return models.Order(
        oid=oid,
        order_date=order.order_date,
        total_price=order.total_price,
        description=order.description,
        line_items=list(order.line_items),
    )


async def update_order(oid: int, order: models.Order) -> int:
    return await _write(
        """
        UPDATE pedidos
        SET fechaPedido = ?, precioTotal = ?, descripcion = ?, productos = ?
        WHERE id = ?;
        """,
        (
            order.order_date,
            order.total_price,
            order.description,
            _line_items_json(order.line_items),
            oid,
        ),
    )


async def delete_order(oid: int) -> int:
    return await _write("DELETE FROM pedidos WHERE id = ?;", (oid,))


# ---------------------------
# Checkout
# ---------------------------


async def checkout(
    cart: Sequence[models.Product], when: Optional[date] = None
) -> models.Order:
    """
    Turn a cart into a persisted order and decrement the stock of every
    purchased product, as one transaction.

    BEGIN IMMEDIATE takes the write lock before the product list is read, so
    two checkouts of the same product cannot both decrement from the same
    stock value. Any failure (empty cart, insufficient stock, sqlite error)
    rolls back both the order and the stock writes.
    """
    async with _store_errors():
        async with connect() as conn:
            await conn.execute("BEGIN IMMEDIATE;")
            try:
                rows = await _fetch_all(conn, f"{_PRODUCT_SELECT} ORDER BY id;")
                products = [models.Product.from_record(row) for row in rows]
                plan = plan_checkout(cart, products, when)

                oid = await _insert_order(conn, plan.order)
                for name, stock in plan.new_stock.items():
                    await conn.execute(
                        "UPDATE productos SET stock = ? WHERE nombre = ?;",
                        (stock, name),
                    )
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    _logger.info(
        f"Checkout stored order {oid} ({plan.order.total_price:.2f}), "
        f"stock updated for {len(plan.new_stock)} products"
    )
    return models.Order(
        oid=oid,
        order_date=plan.order.order_date,
        total_price=plan.order.total_price,
        description=plan.order.description,
        line_items=plan.order.line_items,
    )
