import asyncio
import os
import sys
import tempfile
import unittest
from datetime import date

from db import crud
from db import database as db_database
from db.errors import DuplicateKeyError, EmptyCartError, OutOfStockError, StoreError
from db.models import Order, Product

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

SEED_DIR = os.path.join(ROOT, "data", "seed")


def snapshot(product: Product) -> Product:
    # what the storefront puts into the cart
    return Product(
        pid=product.pid,
        name=product.name,
        stock=product.stock,
        price=product.price,
        photos=list(product.photos),
        category=product.category,
    )


class CrudTestCase(unittest.IsolatedAsyncioTestCase):
    seed_dir = SEED_DIR

    def setUp(self):
        # Point the DB to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database.SEED_DIR = self.seed_dir
        db_database._initialized = False

    async def asyncSetUp(self):
        # Touch initialization by opening a connection
        async with db_database.connect() as conn:
            cur = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table';"
            )
            await cur.fetchall()
            await cur.close()

    def tearDown(self):
        self.temp_dir.cleanup()

    async def product(self, name: str) -> Product:
        found = await crud.get_product(name)
        self.assertIsNotNone(found, name)
        return found

    # ---------- Seeding ----------

    async def test_seed_loaded_once(self):
        users = await crud.list_users()
        self.assertEqual([u.name for u in users], ["admin", "cliente", "maria"])
        self.assertEqual(len(await crud.list_products()), 5)
        orders = await crud.list_orders()
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0].description, "Camiseta\nJeans")

        # a second initialization of the same file must not seed again
        db_database._initialized = False
        async with db_database.connect():
            pass
        self.assertEqual(await crud.count_users(), 3)
        self.assertEqual(len(await crud.list_products()), 5)

    async def test_seed_after_users_deleted_reloads_bootstrap(self):
        for user in await crud.list_users():
            await crud.delete_user(user.uid)
        self.assertEqual(await crud.count_users(), 0)

        db_database._initialized = False
        async with db_database.connect():
            pass
        self.assertEqual(await crud.count_users(), 3)
        # products are INSERT OR IGNORE, nothing duplicated
        self.assertEqual(len(await crud.list_products()), 5)

    # ---------- Users ----------

    async def test_user_crud(self):
        user = await crud.create_user("pedro", "secreto", "cliente")
        self.assertIsInstance(user.uid, int)
        self.assertEqual(await crud.get_user(user.uid), user)

        changes = await crud.update_user(user.uid, "pedro", "otro", "admin")
        self.assertEqual(changes, 1)
        updated = await crud.get_user(user.uid)
        self.assertEqual(updated.pwd, "otro")
        self.assertEqual(updated.role, "admin")

        self.assertEqual(await crud.delete_user(user.uid), 1)
        self.assertIsNone(await crud.get_user(user.uid))
        self.assertEqual(await crud.delete_user(user.uid), 0)
        self.assertEqual(await crud.update_user(424242, "x", "y", "admin"), 0)

    async def test_duplicate_user_rejected(self):
        with self.assertRaises(DuplicateKeyError) as ctx:
            await crud.create_user("admin", "other", "admin")
        self.assertIn("UNIQUE", str(ctx.exception))

        admins = [u for u in await crud.list_users() if u.name == "admin"]
        self.assertEqual(len(admins), 1)

    # ---------- Products ----------

    async def test_product_photos_keep_order(self):
        photos = ["c.jpg", "a.jpg", "b.jpg"]
        created = await crud.create_product("Falda", 2, 15.5, photos, "mujer")
        self.assertEqual(created.photos, photos)
        self.assertEqual((await self.product("Falda")).photos, photos)

    async def test_duplicate_product_rejected(self):
        with self.assertRaises(DuplicateKeyError):
            await crud.create_product("Camiseta", 1, 1.0, [], "hombre")

    async def test_partial_product_update(self):
        self.assertEqual(await crud.update_product("Vestido", stock=9), 1)
        vestido = await self.product("Vestido")
        self.assertEqual(vestido.stock, 9)
        self.assertEqual(vestido.price, 39.95)
        self.assertEqual(vestido.photos, ["vestido_1.jpg", "vestido_2.jpg"])

        # rename goes through the old name
        changes = await crud.update_product("Vestido", name="Vestido largo", price=45.0)
        self.assertEqual(changes, 1)
        self.assertIsNone(await crud.get_product("Vestido"))
        renamed = await self.product("Vestido largo")
        self.assertEqual(renamed.price, 45.0)
        self.assertEqual(renamed.stock, 9)

        self.assertEqual(await crud.update_product("Nada", stock=1), 0)
        self.assertEqual(await crud.update_product("Blusa"), 0)
        with self.assertRaises(ValueError):
            await crud.update_product("Blusa", color="rojo")

    async def test_bulk_stock_update(self):
        changes = await crud.update_stocks([("Camiseta", 1), ("Jeans", 0), ("Nada", 7)])
        self.assertEqual(changes, 2)
        self.assertEqual((await self.product("Camiseta")).stock, 1)
        self.assertEqual((await self.product("Jeans")).stock, 0)

    async def test_bulk_stock_update_is_all_or_nothing(self):
        with self.assertRaises(StoreError):
            # negative stock violates the CHECK constraint on the second row
            await crud.update_stocks([("Camiseta", 1), ("Jeans", -1)])
        self.assertEqual((await self.product("Camiseta")).stock, 5)
        self.assertEqual((await self.product("Jeans")).stock, 3)

    async def test_delete_missing_product(self):
        self.assertEqual(await crud.delete_product("Camiseta"), 1)
        self.assertEqual(await crud.delete_product("Camiseta"), 0)

    # ---------- Orders ----------

    async def test_order_crud(self):
        jeans = await self.product("Jeans")
        order = Order(
            oid=None,
            order_date="2025-03-01",
            total_price=25.0,
            description="Jeans",
            line_items=[snapshot(jeans)],
        )
        created = await crud.create_order(order)
        self.assertIsInstance(created.oid, int)
        # manual orders do not touch the stock
        self.assertEqual((await self.product("Jeans")).stock, 3)

        stored = await crud.get_order(created.oid)
        self.assertEqual(stored.line_items[0].name, "Jeans")
        self.assertEqual(stored.line_items[0].photos, ["jeans_1.jpg"])

        edited = Order(
            oid=created.oid,
            order_date="2025-03-02",
            total_price=20.0,
            description="Jeans (rebajados)",
            line_items=stored.line_items,
        )
        self.assertEqual(await crud.update_order(created.oid, edited), 1)
        self.assertEqual((await crud.get_order(created.oid)).total_price, 20.0)

        self.assertEqual(await crud.delete_order(created.oid), 1)
        self.assertIsNone(await crud.get_order(created.oid))
        self.assertEqual(await crud.delete_order(created.oid), 0)

    # ---------- Checkout ----------

    async def test_checkout_creates_order_and_decrements_stock(self):
        camiseta = snapshot(await self.product("Camiseta"))
        jeans = snapshot(await self.product("Jeans"))
        before = len(await crud.list_orders())

        order = await crud.checkout([camiseta, camiseta, jeans], when=date(2025, 6, 1))

        self.assertEqual(order.total_price, 45.0)
        self.assertEqual(order.order_date, "2025-06-01")
        self.assertEqual(order.description, "Camiseta\nCamiseta\nJeans")
        self.assertEqual(len(order.line_items), 3)
        self.assertEqual(len(await crud.list_orders()), before + 1)

        stored = await crud.get_order(order.oid)
        self.assertEqual(stored.total_price, 45.0)
        self.assertEqual([p.name for p in stored.line_items], ["Camiseta", "Camiseta", "Jeans"])

        self.assertEqual((await self.product("Camiseta")).stock, 3)
        self.assertEqual((await self.product("Jeans")).stock, 2)
        self.assertEqual((await self.product("Vestido")).stock, 4)

    async def test_checkout_total_rounds_to_cents(self):
        vestido = snapshot(await self.product("Vestido"))
        blusa = snapshot(await self.product("Blusa"))
        order = await crud.checkout([vestido, vestido, blusa])
        self.assertEqual(order.total_price, 99.4)
        self.assertEqual(order.order_date, date.today().isoformat())

    async def test_concurrent_checkouts_lose_no_decrement(self):
        camiseta = snapshot(await self.product("Camiseta"))
        before = len(await crud.list_orders())

        orders = await asyncio.gather(*(crud.checkout([camiseta]) for _ in range(5)))

        self.assertEqual(len({o.oid for o in orders}), 5)
        self.assertEqual(len(await crud.list_orders()), before + 5)
        self.assertEqual((await self.product("Camiseta")).stock, 0)

    async def test_concurrent_checkouts_never_oversell(self):
        jeans = snapshot(await self.product("Jeans"))
        before = len(await crud.list_orders())

        results = await asyncio.gather(
            *(crud.checkout([jeans]) for _ in range(5)), return_exceptions=True
        )

        placed = [r for r in results if not isinstance(r, BaseException)]
        rejected = [r for r in results if isinstance(r, BaseException)]
        self.assertEqual(len(placed), 3)
        self.assertEqual(len(rejected), 2)
        for exc in rejected:
            self.assertIsInstance(exc, OutOfStockError)
        self.assertEqual(len(await crud.list_orders()), before + 3)
        self.assertEqual((await self.product("Jeans")).stock, 0)

    async def test_checkout_empty_cart(self):
        before = len(await crud.list_orders())
        with self.assertRaises(EmptyCartError):
            await crud.checkout([])
        self.assertEqual(len(await crud.list_orders()), before)

    async def test_checkout_out_of_stock_rolls_back(self):
        jeans = snapshot(await self.product("Jeans"))
        camiseta = snapshot(await self.product("Camiseta"))
        before = len(await crud.list_orders())

        with self.assertRaises(OutOfStockError) as ctx:
            await crud.checkout([camiseta] + [jeans] * 4)
        self.assertEqual(ctx.exception.shortages, {"Jeans": -1})

        self.assertEqual(len(await crud.list_orders()), before)
        self.assertEqual((await self.product("Jeans")).stock, 3)
        self.assertEqual((await self.product("Camiseta")).stock, 5)

    async def test_checkout_sold_out_product(self):
        chaqueta = snapshot(await self.product("Chaqueta"))
        with self.assertRaises(OutOfStockError):
            await crud.checkout([chaqueta])
        self.assertEqual((await self.product("Chaqueta")).stock, 0)

    async def test_checkout_ignores_products_no_longer_listed(self):
        blusa = snapshot(await self.product("Blusa"))
        await crud.delete_product("Blusa")
        camiseta = snapshot(await self.product("Camiseta"))

        order = await crud.checkout([blusa, camiseta])

        # the order keeps the snapshot, only listed products lose stock
        self.assertEqual(order.total_price, 29.5)
        self.assertEqual(len(order.line_items), 2)
        self.assertEqual((await self.product("Camiseta")).stock, 4)
        self.assertIsNone(await crud.get_product("Blusa"))


class BootstrapSeedTestCase(unittest.IsolatedAsyncioTestCase):
    """No seed documents at all: only the bootstrap users exist."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "nested", "test.sqlite")
        db_database.SEED_DIR = os.path.join(self.temp_dir.name, "no-seed")
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_bootstrap_users_only(self):
        users = await crud.list_users()
        self.assertEqual(
            [(u.name, u.role) for u in users], [("admin", "admin"), ("cliente", "cliente")]
        )
        self.assertEqual(await crud.list_products(), [])
        self.assertEqual(await crud.list_orders(), [])
        self.assertTrue(os.path.exists(db_database.DB_PATH))


if __name__ == "__main__":
    unittest.main()
