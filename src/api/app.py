import os
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import CheckoutIn, OrderIn, ProductIn, ProductPatch, StockUpdate, UserIn
from db import crud
from db.errors import DuplicateKeyError, OutOfStockError, StoreError, ValidationError
from utils.logger import get_logger

_logger = get_logger(__name__)

PORT = int(os.getenv("PORT", 3001))
FRONTEND_URL = os.getenv("FRONTEND_URL")

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3002",
    "http://localhost:3003",
]
if FRONTEND_URL:
    ALLOWED_ORIGINS.append(FRONTEND_URL)

app = FastAPI(title="Tienda API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------
# Error mapping
# -----------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error(404, "Ruta no encontrada")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    ]
    _logger.warning(f"Invalid request to {request.url.path}: {problems}")
    return _error(400, "Datos inválidos: " + "; ".join(problems))


@app.exception_handler(OutOfStockError)
async def out_of_stock_error(request: Request, exc: OutOfStockError):
    return _error(409, str(exc))


@app.exception_handler(ValidationError)
async def validation_error(request: Request, exc: ValidationError):
    return _error(400, str(exc))


# duplicates keep the raw constraint message and a 500, like any store failure
@app.exception_handler(StoreError)
async def store_error(request: Request, exc: StoreError):
    _logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return _error(500, str(exc))


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    _logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error(500, str(exc))


@app.get("/")
def root():
    return {"name": "Tienda API", "status": "ok"}


# -----------------
# Users
# -----------------


@app.get("/api/usuarios")
async def list_users():
    return [u.as_record() for u in await crud.list_users()]


@app.post("/api/usuarios")
async def create_user(payload: UserIn):
    user = await crud.create_user(payload.usuario, payload.pwd, payload.tipo)
    _logger.info(f"User created: {user.name}")
    return {**user.as_record(), "success": True}


@app.put("/api/usuarios/{uid}")
async def update_user(uid: int, payload: UserIn):
    changes = await crud.update_user(uid, payload.usuario, payload.pwd, payload.tipo)
    return {"success": True, "changes": changes}


@app.delete("/api/usuarios/{uid}")
async def delete_user(uid: int):
    changes = await crud.delete_user(uid)
    return {"success": True, "changes": changes}


# -----------------
# Products (addressed by name)
# -----------------


@app.get("/api/productos")
async def list_products():
    return [p.as_record() for p in await crud.list_products()]


@app.post("/api/productos")
async def create_product(payload: ProductIn):
    product = await crud.create_product(
        payload.nombre, payload.stock, payload.precio, payload.fotos, payload.categoria
    )
    _logger.info(f"Product created: {product.name}")
    return {**product.as_record(), "success": True}


@app.put("/api/productos")
async def update_stocks(payload: List[StockUpdate]):
    await crud.update_stocks([(p.nombre, p.stock) for p in payload])
    _logger.info(f"Stock updated for {len(payload)} products")
    return {"success": True}


# names may contain "/", which arrives decoded in the path
@app.put("/api/productos/{nombre:path}")
async def update_product(nombre: str, payload: ProductPatch):
    changes = await crud.update_product(nombre, **payload.changes())
    _logger.info(f"Product updated: {nombre} ({changes} rows)")
    return {"success": True, "changes": changes}


@app.delete("/api/productos/{nombre:path}")
async def delete_product(nombre: str):
    changes = await crud.delete_product(nombre)
    return {"success": True, "changes": changes}


# -----------------
# Orders / Checkout
# -----------------


@app.get("/api/pedidos")
async def list_orders():
    return [o.as_record() for o in await crud.list_orders()]


@app.post("/api/pedidos")
async def create_order(payload: OrderIn):
    order = await crud.create_order(payload.to_model())
    return {"id": order.oid, "success": True}


@app.put("/api/pedidos/{oid}")
async def update_order(oid: int, payload: OrderIn):
    changes = await crud.update_order(oid, payload.to_model(oid))
    return {"success": True, "changes": changes}


@app.delete("/api/pedidos/{oid}")
async def delete_order(oid: int):
    changes = await crud.delete_order(oid)
    return {"success": True, "changes": changes}


@app.post("/api/checkout")
async def checkout(payload: CheckoutIn):
    """Order insert and stock decrement in one transaction."""
    order = await crud.checkout(payload.cart())
    return {"id": order.oid, "precioTotal": order.total_price, "success": True}


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
