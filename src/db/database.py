# manages connection to db, provides helper methods internal to db package
import asyncio
import json
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

# the db file can live on an ephemeral filesystem, so both are configurable
DB_PATH = os.getenv("TIENDA_DB_PATH", "data/tienda.sqlite")
SEED_DIR = os.getenv("TIENDA_SEED_DIR", "data/seed")
DB_INIT_SCRIPT = os.path.join(os.path.dirname(__file__), "tables.sql")

# used when no usuarios.json is shipped next to the db
BOOTSTRAP_USERS = [
    {"usuario": "admin", "pwd": "admin", "tipo": "admin"},
    {"usuario": "cliente", "pwd": "cliente", "tipo": "cliente"},
]

_initialized = False
_init_lock = asyncio.Lock()


def _load_seed(name: str):
    path = os.path.join(SEED_DIR, name)
    if not os.path.exists(path) or os.path.getsize(path) == 0:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


async def _create_tables(conn: aiosqlite.Connection) -> None:
    with open(DB_INIT_SCRIPT, "r") as f:
        await conn.executescript(f.read())
    await conn.commit()


async def _seed_db(conn: aiosqlite.Connection) -> None:
    """
    Load the bootstrap documents. Only called while the users table is empty,
    so it runs exactly once per database file.
    """
    users = _load_seed("usuarios.json") or BOOTSTRAP_USERS
    await conn.executemany(
        "INSERT OR IGNORE INTO usuarios(usuario, pwd, tipo) VALUES (?, ?, ?);",
        [(u["usuario"], u["pwd"], u["tipo"]) for u in users],
    )

    products = _load_seed("productos.json") or []
    await conn.executemany(
        """
        INSERT OR IGNORE INTO productos(nombre, stock, precio, fotos, categoria)
        VALUES (?, ?, ?, ?, ?);
        """,
        [
            (
                p["nombre"],
                p["stock"],
                p["precio"],
                json.dumps(p.get("fotos", [])),
                p["categoria"],
            )
            for p in products
        ],
    )

    orders = _load_seed("pedidos.json")
    if orders is None:
        _logger.info("No previous orders to load.")
        orders = []
    await conn.executemany(
        """
        INSERT OR IGNORE INTO pedidos(id, fechaPedido, precioTotal, descripcion, productos)
        VALUES (?, ?, ?, ?, ?);
        """,
        [
            (
                o.get("id"),
                o["fechaPedido"],
                o["precioTotal"],
                o.get("descripcion", ""),
                json.dumps(o.get("productos", [])),
            )
            for o in orders
        ],
    )
    await conn.commit()
    _logger.info(
        f"Seeded {len(users)} users, {len(products)} products, {len(orders)} orders."
    )


async def _count_users(conn: aiosqlite.Connection) -> int:
    cur = await conn.execute("SELECT COUNT(*) FROM usuarios;")
    row = await cur.fetchone()
    await cur.close()
    return int(row[0])


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Ensures the tables exist on first use, and seeds the bootstrap data
    when the users table is empty.
    """
    global _initialized
    db_dir = os.path.dirname(DB_PATH)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = Row

    try:
        if not _initialized:
            async with _init_lock:
                if not _initialized:
                    _logger.info(f"Initializing database {DB_PATH}...")
                    await _create_tables(conn)
                    if await _count_users(conn) == 0:
                        await _seed_db(conn)
                    _initialized = True
        yield conn
    finally:
        await conn.close()
