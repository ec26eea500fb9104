import os
import tempfile
import unittest

from fastapi.testclient import TestClient

from api.app import app
from db import database as db_database

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SEED_DIR = os.path.join(ROOT, "data", "seed")


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "api.sqlite")
        db_database.SEED_DIR = SEED_DIR
        db_database._initialized = False
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        self.temp_dir.cleanup()

    def stock_of(self, name):
        products = self.client.get("/api/productos").json()
        return next(p["stock"] for p in products if p["nombre"] == name)

    def test_root(self):
        res = self.client.get("/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["status"], "ok")

    def test_unknown_route(self):
        res = self.client.get("/api/nada")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"error": "Ruta no encontrada"})

    def test_cors_allows_dev_frontend(self):
        res = self.client.get(
            "/api/productos", headers={"Origin": "http://localhost:3000"}
        )
        self.assertEqual(
            res.headers.get("access-control-allow-origin"), "http://localhost:3000"
        )

    # ---------- users ----------

    def test_users(self):
        users = self.client.get("/api/usuarios").json()
        self.assertEqual([u["usuario"] for u in users], ["admin", "cliente", "maria"])
        self.assertEqual(set(users[0]), {"id", "usuario", "pwd", "tipo"})

        res = self.client.post(
            "/api/usuarios", json={"usuario": "pedro", "pwd": "pw", "tipo": "cliente"}
        )
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertTrue(body["success"])
        uid = body["id"]

        res = self.client.put(
            f"/api/usuarios/{uid}", json={"usuario": "pedro", "pwd": "nuevo", "tipo": "admin"}
        )
        self.assertEqual(res.json(), {"success": True, "changes": 1})

        self.assertEqual(self.client.delete(f"/api/usuarios/{uid}").json()["changes"], 1)
        self.assertEqual(self.client.delete(f"/api/usuarios/{uid}").json()["changes"], 0)

    def test_duplicate_user(self):
        res = self.client.post(
            "/api/usuarios", json={"usuario": "admin", "pwd": "x", "tipo": "admin"}
        )
        self.assertEqual(res.status_code, 500)
        self.assertIn("UNIQUE", res.json()["error"])
        names = [u["usuario"] for u in self.client.get("/api/usuarios").json()]
        self.assertEqual(names.count("admin"), 1)

    def test_invalid_body(self):
        res = self.client.post("/api/usuarios", json={"usuario": "pedro"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("pwd", res.json()["error"])

        res = self.client.post(
            "/api/productos",
            json={"nombre": "Falda", "stock": -1, "precio": 1, "categoria": "mujer"},
        )
        self.assertEqual(res.status_code, 400)

    # ---------- products ----------

    def test_product_lifecycle(self):
        res = self.client.post(
            "/api/productos",
            json={
                "nombre": "Falda midi",
                "stock": 2,
                "precio": 22.5,
                "fotos": ["falda_2.jpg", "falda_1.jpg"],
                "categoria": "mujer",
            },
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["fotos"], ["falda_2.jpg", "falda_1.jpg"])

        res = self.client.put("/api/productos/Falda%20midi", json={"stock": 7})
        self.assertEqual(res.json(), {"success": True, "changes": 1})
        self.assertEqual(self.stock_of("Falda midi"), 7)

        res = self.client.put(
            "/api/productos/Falda%20midi", json={"nombre": "Falda", "precio": 20}
        )
        self.assertEqual(res.json()["changes"], 1)
        falda = next(
            p for p in self.client.get("/api/productos").json() if p["nombre"] == "Falda"
        )
        self.assertEqual(falda["precio"], 20.0)
        self.assertEqual(falda["fotos"], ["falda_2.jpg", "falda_1.jpg"])

        self.assertEqual(self.client.delete("/api/productos/Falda").json()["changes"], 1)
        self.assertEqual(self.client.delete("/api/productos/Falda").json()["changes"], 0)

    def test_product_name_with_slash(self):
        res = self.client.post(
            "/api/productos",
            json={"nombre": "Pack 2/3", "stock": 4, "precio": 12, "categoria": "hombre"},
        )
        self.assertEqual(res.status_code, 200)

        res = self.client.put("/api/productos/Pack%202%2F3", json={"stock": 2})
        self.assertEqual(res.json(), {"success": True, "changes": 1})
        self.assertEqual(self.stock_of("Pack 2/3"), 2)

        res = self.client.delete("/api/productos/Pack%202%2F3")
        self.assertEqual(res.json(), {"success": True, "changes": 1})

    def test_bulk_stock_update(self):
        res = self.client.put(
            "/api/productos",
            json=[{"nombre": "Camiseta", "stock": 1}, {"nombre": "Jeans", "stock": 0}],
        )
        self.assertEqual(res.json(), {"success": True})
        self.assertEqual(self.stock_of("Camiseta"), 1)
        self.assertEqual(self.stock_of("Jeans"), 0)

    # ---------- orders ----------

    def test_orders(self):
        orders = self.client.get("/api/pedidos").json()
        self.assertEqual(len(orders), 1)
        self.assertEqual(orders[0]["productos"][0]["nombre"], "Camiseta")

        order = {
            "fechaPedido": "2025-03-01",
            "precioTotal": 19.5,
            "descripcion": "Blusa",
            "productos": [
                {"nombre": "Blusa", "stock": 6, "precio": 19.5, "fotos": [], "categoria": "mujer"}
            ],
        }
        res = self.client.post("/api/pedidos", json=order)
        oid = res.json()["id"]
        self.assertTrue(res.json()["success"])
        # legacy order creation does not change stock
        self.assertEqual(self.stock_of("Blusa"), 6)

        order["precioTotal"] = 15.0
        res = self.client.put(f"/api/pedidos/{oid}", json=order)
        self.assertEqual(res.json()["changes"], 1)

        self.assertEqual(self.client.delete(f"/api/pedidos/{oid}").json()["changes"], 1)
        self.assertEqual(len(self.client.get("/api/pedidos").json()), 1)

    def test_checkout(self):
        products = {p["nombre"]: p for p in self.client.get("/api/productos").json()}
        cart = [products["Camiseta"], products["Camiseta"], products["Jeans"]]

        res = self.client.post("/api/checkout", json={"productos": cart})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["precioTotal"], 45.0)
        self.assertTrue(body["success"])

        self.assertEqual(self.stock_of("Camiseta"), 3)
        self.assertEqual(self.stock_of("Jeans"), 2)
        orders = self.client.get("/api/pedidos").json()
        self.assertEqual(orders[-1]["id"], body["id"])
        self.assertEqual(len(orders[-1]["productos"]), 3)

    def test_checkout_empty_cart(self):
        res = self.client.post("/api/checkout", json={"productos": []})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "El carrito está vacío"})

    def test_checkout_out_of_stock(self):
        products = {p["nombre"]: p for p in self.client.get("/api/productos").json()}
        res = self.client.post(
            "/api/checkout", json={"productos": [products["Chaqueta"]]}
        )
        self.assertEqual(res.status_code, 409)
        self.assertIn("Chaqueta", res.json()["error"])
        self.assertEqual(len(self.client.get("/api/pedidos").json()), 1)


if __name__ == "__main__":
    unittest.main()
