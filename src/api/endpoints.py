# src/api/endpoints.py
from __future__ import annotations

import asyncio
import mimetypes
import os
from typing import Any, Dict, List, Optional, Tuple

from api.errors import GatewayError
from api.gateway import RequestGateway
from api.models import DashboardStats, Order, Product, User

SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")

# backend requires an address on every order; the catalog has no address form
DEFAULT_SHIPPING_ADDRESS = {
    "street": "Default Street",
    "city": "Default City",
    "state": "Default State",
    "zipCode": "12345",
    "country": "Default Country",
}


def _read_file(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def _file_part(path: str) -> Tuple[str, bytes, str]:
    try:
        content = await asyncio.to_thread(_read_file, path)
    except OSError as exc:
        raise GatewayError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return os.path.basename(path), content, mime


def _as_dict(payload: Any) -> Dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise GatewayError("Malformed response from server")
    return payload


def _as_list(payload: Any) -> List[Dict[str, Any]]:
    if payload is None:
        return []
    if not isinstance(payload, list) or not all(isinstance(i, dict) for i in payload):
        raise GatewayError("Malformed response from server")
    return payload




# ---------------------------
# Auth
# ---------------------------


async def login(gw: RequestGateway, username: str, password: str) -> Dict[str, Any]:
    """Returns the raw payload: {token, refreshToken?, user}."""
    return _as_dict(
        await gw.post(
            "/auth/login",
            json={"username": username, "password": password},
            authenticate=False,
        )
    )


async def register(gw: RequestGateway, username: str, password: str) -> Dict[str, Any]:
    return _as_dict(
        await gw.post(
            "/auth/register",
            json={"username": username, "password": password},
            authenticate=False,
        )
    )


async def current_user(gw: RequestGateway) -> User:
    return User.from_dict(_as_dict(await gw.get("/auth/me")))


# ---------------------------
# Products
# ---------------------------


async def list_products(gw: RequestGateway) -> List[Product]:
    return [Product.from_dict(p) for p in _as_list(await gw.get("/api/products"))]


async def create_product(gw: RequestGateway, data: Dict[str, Any]) -> Product:
    return Product.from_dict(_as_dict(await gw.post("/api/products", json=data)))


async def update_product(
    gw: RequestGateway, product_id: str, patch: Dict[str, Any]
) -> Product:
    payload = _as_dict(await gw.put(f"/api/products/{product_id}", json=patch))
    return Product.from_dict({"_id": product_id, **payload})


async def delete_product(gw: RequestGateway, product_id: str) -> None:
    await gw.delete(f"/api/products/{product_id}")


async def import_products(gw: RequestGateway, path: str) -> Any:
    """Upload an Excel sheet with columns name | description | price | stock."""
    part = await _file_part(path)
    return await gw.post("/api/products/import", files={"file": part})


# ---------------------------
# Orders
# ---------------------------


async def list_orders(gw: RequestGateway, user: Optional[str] = None) -> List[Order]:
    params = {"user": user} if user else None
    payload = await gw.get("/api/orders", params=params)
    return [Order.from_dict(o) for o in _as_list(payload)]


async def list_my_orders(gw: RequestGateway) -> List[Order]:
    return [Order.from_dict(o) for o in _as_list(await gw.get("/api/orders/my-orders"))]


async def create_order(gw: RequestGateway, data: Dict[str, Any]) -> Order:
    return Order.from_dict(_as_dict(await gw.post("/api/orders", json=data)))


async def update_order_status(gw: RequestGateway, order_id: str, status: str) -> Any:
    return await gw.put(f"/api/orders/{order_id}/status", json={"status": status})


async def delete_order(gw: RequestGateway, order_id: str) -> None:
    await gw.delete(f"/api/orders/{order_id}")


async def delete_all_orders(gw: RequestGateway) -> None:
    await gw.delete("/api/orders")


# ---------------------------
# Users
# ---------------------------


async def list_users(
    gw: RequestGateway, page: int = 1, limit: int = 10
) -> Tuple[List[User], int]:
    """Returns (users on the page, total number of users)."""
    payload = await gw.get("/api/users", params={"page": page, "limit": limit})
    if isinstance(payload, list):  # older backends answer with a bare list
        return [User.from_dict(u) for u in _as_list(payload)], len(payload)
    payload = _as_dict(payload)
    users = [User.from_dict(u) for u in _as_list(payload.get("users"))]
    total = payload.get("total")
    return users, total if isinstance(total, int) else len(users)


async def create_user(gw: RequestGateway, data: Dict[str, Any]) -> User:
    return User.from_dict(_as_dict(await gw.post("/api/users", json=data)))


async def update_user(gw: RequestGateway, user_id: str, patch: Dict[str, Any]) -> User:
    payload = _as_dict(await gw.put(f"/api/users/{user_id}", json=patch))
    return User.from_dict({"_id": user_id, **payload})


async def delete_user(gw: RequestGateway, user_id: str) -> None:
    await gw.delete(f"/api/users/{user_id}")


# ---------------------------
# Admin
# ---------------------------


async def dashboard_stats(gw: RequestGateway) -> DashboardStats:
    payload = _as_dict(await gw.get("/admin/dashboard"))
    _as_list(payload.get("recentOrders"))  # only validates the shape
    return DashboardStats.from_dict(payload)


async def showcase_image(gw: RequestGateway) -> Optional[str]:
    payload = _as_dict(await gw.get("/api/admin/showcase-image"))
    return payload.get("imageUrl") or payload.get("url")


async def upload_showcase_image(gw: RequestGateway, path: str) -> Optional[str]:
    part = await _file_part(path)
    payload = _as_dict(await gw.post("/api/admin/showcase-image", files={"image": part}))
    return payload.get("imageUrl") or payload.get("url")
