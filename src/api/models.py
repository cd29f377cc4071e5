# dataclass models for the entities the backend hands us

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

ROLES = ("user", "admin")
ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


def _entity_id(data: Dict[str, Any]) -> str:
    return str(data.get("_id") or data.get("id") or "")


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class User:
    id: str
    username: str
    role: str = "user"  # "user" or "admin"
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> User:
        return cls(
            id=_entity_id(data),
            username=data.get("username", ""),
            role=data.get("role") or "user",
            created_at=_parse_datetime(data.get("createdAt")),
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str = ""
    description: str = ""
    price: float = 0.0
    stock: int = 0

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Product:
        return cls(
            id=_entity_id(data),
            name=data.get("name", ""),
            description=data.get("description", ""),
            price=_to_float(data.get("price")),
            stock=_to_int(data.get("stock")),
        )


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    quantity: int
    price: float  # unit price at time of order
    product_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OrderItem:
        product = data.get("product")
        details = data.get("productDetails") or {}
        if isinstance(product, dict):
            details = details or product
            product_id = _entity_id(product)
        else:
            product_id = str(product or "")

        price = data.get("price")
        if price is None:
            price = details.get("price")

        return cls(
            product_id=product_id,
            quantity=_to_int(data.get("quantity")),
            price=_to_float(price),
            product_name=details.get("name"),
        )


@dataclass(frozen=True)
class Order:
    id: str
    items: Tuple[OrderItem, ...] = ()
    total_amount: float = 0.0
    status: str = "pending"
    created_at: Optional[datetime] = None
    username: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Order:
        owner = data.get("user")
        username = owner.get("username") if isinstance(owner, dict) else None
        return cls(
            id=_entity_id(data),
            items=tuple(OrderItem.from_dict(i) for i in data.get("items") or []),
            total_amount=_to_float(data.get("totalAmount")),
            status=data.get("status") or "pending",
            created_at=_parse_datetime(data.get("createdAt")),
            username=username,
        )


@dataclass(frozen=True)
class DashboardStats:
    total_products: int = 0
    total_orders: int = 0
    active_users: int = 0
    total_revenue: float = 0.0
    recent_orders: Tuple[Order, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> DashboardStats:
        data = data or {}
        return cls(
            total_products=_to_int(data.get("totalProducts")),
            total_orders=_to_int(data.get("totalOrders")),
            active_users=_to_int(data.get("activeUsers")),
            total_revenue=_to_float(data.get("totalRevenue")),
            recent_orders=tuple(
                Order.from_dict(o) for o in data.get("recentOrders") or []
            ),
        )
