import asyncio
import os
from typing import List, Optional

import requests
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from api.client import ApiClient, ApiError
from db.models import Order, Product
from utils.logger import get_logger, use_log_file
from utils.messages import QuitRequestedMessage, UserLogoutMessage
from utils.session import ViewRouter
from views.modal_dialog import AlertModal
from views.scr_admin import AdminScreen
from views.scr_cart import CartScreen
from views.scr_catalog import CatalogScreen
from views.scr_login import LoginScreen
from views.scr_manage_orders import OrderManagementScreen
from views.scr_manage_products import ProductManagementScreen
from views.scr_manage_users import UserManagementScreen

LOG_FILE = os.getenv("TIENDA_LOG_FILE", "data/tienda-tui.log")

_logger = get_logger(__name__)


class TiendaApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Cambiar tema", show=True),
    ]

    # one screen per router view, except the detail view which is a modal
    SCREENS_BY_VIEW = {
        "catalog": CatalogScreen,
        "cart": CartScreen,
        "admin": AdminScreen,
        "userManagement": UserManagementScreen,
        "productManagement": ProductManagementScreen,
        "orderManagement": OrderManagementScreen,
    }

    ADMIN_VIEWS = {
        "admin": "Panel",
        "orderManagement": "Pedidos",
        "userManagement": "Usuarios",
        "productManagement": "Productos",
    }
    CUSTOMER_VIEWS = {"catalog": "Catálogo", "cart": "Carrito"}

    CSS_PATH = "views/styles/index.tcss"

    router: ViewRouter

    def __init__(self, api: Optional[ApiClient] = None):
        super().__init__()
        self.api = api or ApiClient()
        self.router = ViewRouter()
        # last snapshots read from the api, refreshed after every write
        self.products: List[Product] = []
        self.orders: List[Order] = []

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Tema cambiado a {self.theme}")

    async def call_api(self, fn, *args):
        """
        Run a blocking api call off the event loop. On failure a blocking
        alert is shown and None is returned; the caller leaves its state as is.
        Must be awaited from a worker.
        """
        try:
            return await asyncio.to_thread(fn, *args)
        except ApiError as exc:
            await self.push_screen_wait(AlertModal(f"Error: {exc.message}", error=True))
        except requests.RequestException as exc:
            _logger.error(f"API unreachable: {exc}")
            await self.push_screen_wait(
                AlertModal(
                    f"No se puede conectar con el servidor en {self.api.base_url}.",
                    error=True,
                )
            )
        return None

    async def refresh_products(self) -> Optional[List[Product]]:
        products = await self.call_api(self.api.list_products)
        if products is not None:
            self.products = products
        return products

    async def refresh_orders(self) -> Optional[List[Order]]:
        orders = await self.call_api(self.api.list_orders)
        if orders is not None:
            self.orders = orders
        return orders

    @work(exclusive=True, group="navigation")
    async def show(self, view: str) -> None:
        """Move the router to `view` and put its screen on top."""
        try:
            self.router.go(view)
        except ValueError as exc:
            _logger.warning(str(exc))
            return
        await self.switch_screen(self.SCREENS_BY_VIEW[self.router.view]())

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        self.router.logout()
        self.products = []
        self.orders = []
        while len(self.screen_stack) > 1:
            await self.pop_screen()
        self.notify("Sesión cerrada.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.router.logout()
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        await self.push_screen(self.SCREENS_BY_VIEW[self.router.view]())


def main() -> None:
    use_log_file(LOG_FILE)
    TiendaApp().run()


if __name__ == "__main__":
    main()
