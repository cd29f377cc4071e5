# route paths, their screen modes, and who may see them

from typing import Dict, Optional

from api.credentials import LOGIN_ROUTE
from api.models import User

PRODUCTS_ROUTE = "/products"

# route -> textual mode name
ROUTE_MODES: Dict[str, str] = {
    "/products": "products",
    "/orders": "orders",
    "/admin/dashboard": "admin_dashboard",
    "/admin/products": "admin_products",
    "/admin/orders": "admin_orders",
    "/admin/users": "admin_users",
}

ALIASES: Dict[str, str] = {
    "/": LOGIN_ROUTE,
    "/admin": "/admin/dashboard",
}

PUBLIC_ROUTES = {"/products"}

CUSTOMER_MENU = {"/products": "Products", "/orders": "My Orders"}
ADMIN_MENU = {
    "/products": "Catalog",
    "/admin/dashboard": "Dashboard",
    "/admin/products": "Manage Products",
    "/admin/orders": "Manage Orders",
    "/admin/users": "Manage Users",
}


def is_admin_route(route: str) -> bool:
    return route == "/admin" or route.startswith("/admin/")


def normalize(route: Optional[str]) -> str:
    route = (route or "/").rstrip("/") or "/"
    route = ALIASES.get(route, route)
    if route != LOGIN_ROUTE and route not in ROUTE_MODES:
        return LOGIN_ROUTE
    return route


def guard(route: Optional[str], authenticated: bool, user: Optional[User]) -> str:
    """
    The route that is actually shown when `route` is requested.

    Anonymous visitors only get the catalog and the login page; admin pages
    send non admins back to the catalog.
    """
    route = normalize(route)

    if route == LOGIN_ROUTE:
        return PRODUCTS_ROUTE if authenticated else LOGIN_ROUTE
    if route in PUBLIC_ROUTES:
        return route
    if not authenticated:
        return LOGIN_ROUTE
    if is_admin_route(route) and not (user and user.is_admin):
        return PRODUCTS_ROUTE
    return route


def start_route(
    last_route: Optional[str], authenticated: bool, user: Optional[User]
) -> str:
    """Where to land after startup or login: the remembered page, if allowed."""
    return guard(last_route or PRODUCTS_ROUTE, authenticated, user)


def mode_for(route: str) -> Optional[str]:
    return ROUTE_MODES.get(route)


def route_for(mode: str) -> Optional[str]:
    for route, name in ROUTE_MODES.items():
        if name == mode:
            return route
    return None


def menu_for(user: Optional[User]) -> Dict[str, str]:
    return ADMIN_MENU if user and user.is_admin else CUSTOMER_MENU
