from __future__ import annotations

from dataclasses import dataclass, field

from api.credentials import CredentialStore
from api.gateway import RequestGateway
from api.models import DashboardStats
from stores.auth import AuthStore
from stores.dashboard import DashboardStore, ShowcaseStore
from stores.orders import OrderStore
from stores.products import ProductStore
from stores.users import UserStore
from utils.config import Settings


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - credentials: persisted token pair and last route
      - gateway: the single request gateway every store talks through
      - auth / products / orders / users / dashboard / showcase: one store
        per backend collection
    """

    credentials: CredentialStore
    gateway: RequestGateway
    auth: AuthStore = field(init=False)
    products: ProductStore = field(init=False)
    orders: OrderStore = field(init=False)
    users: UserStore = field(init=False)
    dashboard: DashboardStore = field(init=False)
    showcase: ShowcaseStore = field(init=False)

    def __post_init__(self) -> None:
        self.auth = AuthStore(self.gateway)
        self.products = ProductStore(self.gateway)
        self.orders = OrderStore(self.gateway)
        self.users = UserStore(self.gateway)
        self.dashboard = DashboardStore(self.gateway)
        self.showcase = ShowcaseStore(self.gateway)

    @classmethod
    def from_settings(cls, settings: Settings, transport=None) -> GlobalState:
        credentials = CredentialStore(settings.storage_path)
        gateway = RequestGateway(settings.api_url, credentials, transport=transport)
        return cls(credentials=credentials, gateway=gateway)

    def forget_caches(self) -> None:
        """Drop everything cached for the previous user."""
        for store in (self.products, self.orders, self.users):
            store.items = []
            store.error = None
        self.orders.user_filter = None
        self.orders.clear_current()
        self.dashboard.stats = DashboardStats()
        self.showcase.image_url = None

    async def remember_route(self, route: str) -> None:
        await self.credentials.remember_route(route)

    async def close(self) -> None:
        await self.gateway.aclose()
