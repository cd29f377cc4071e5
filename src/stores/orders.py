from __future__ import annotations

from typing import Any, Dict, List, Optional

from api import endpoints
from api.endpoints import DEFAULT_SHIPPING_ADDRESS
from api.models import Order, Product
from stores.base import Store


class OrderStore(Store[Order]):
    """
    Orders of the current user (`fetch_mine`) or, for admins, of everybody
    (`fetch_all`, optionally filtered by user id). Both fill the same cache.
    """

    def __init__(self, gateway) -> None:
        super().__init__(gateway)
        self.current: Optional[Order] = None
        self.user_filter: Optional[str] = None

    @property
    def orders(self) -> List[Order]:
        return self.items

    async def fetch_all(self, user: Optional[str] = None) -> Optional[List[Order]]:
        self.user_filter = user

        async def op():
            self.items = await endpoints.list_orders(self.gateway, user)
            return self.items

        return await self._run(op, "Error fetching orders")

    async def fetch_mine(self) -> Optional[List[Order]]:
        async def op():
            self.items = await endpoints.list_my_orders(self.gateway)
            return self.items

        return await self._run(op, "Failed to fetch orders")

    async def create(self, data: Dict[str, Any]) -> Optional[Order]:
        async def op():
            order = await endpoints.create_order(self.gateway, data)
            self._append(order)
            self.current = order
            return order

        return await self._run(op, "Failed to create order")

    async def place_single(self, product: Product) -> Optional[Order]:
        """Order one unit of `product` at its current price."""
        if not product.in_stock:
            self.error = f"{product.name} is out of stock"
            return None

        return await self.create(
            {
                "items": [
                    {"product": product.id, "quantity": 1, "price": product.price}
                ],
                "shippingAddress": dict(DEFAULT_SHIPPING_ADDRESS),
            }
        )

    async def update_status(self, order_id: str, status: str) -> bool:
        """
        Change the status, then reload with the current filter so that
        server side effects (stock, totals) show up.
        """

        async def op():
            await endpoints.update_order_status(self.gateway, order_id, status)
            return True

        if not await self._run(op, "Error updating order status"):
            return False
        await self.fetch_all(self.user_filter)
        return self.error is None

    async def delete(self, order_id: str) -> bool:
        async def op():
            await endpoints.delete_order(self.gateway, order_id)
            self._remove(order_id)
            return True

        return bool(await self._run(op, "Error deleting order"))

    async def delete_all(self) -> bool:
        async def op():
            await endpoints.delete_all_orders(self.gateway)
            self.items = []
            return True

        return bool(await self._run(op, "Error deleting orders"))

    def clear_current(self) -> None:
        self.current = None
