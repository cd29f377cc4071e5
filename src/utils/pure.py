from datetime import datetime
from typing import List, Literal, Optional, Sequence

from api.models import Order, Product, User


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [list(map(str, row)) for row in rows]

    if aligns is None:
        aligns = ["c"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def format_idr(amount: float, decimals: int = 2) -> str:
    """Rupiah the way the shop prints it: Rp 1.234.567,89"""
    digits = f"{abs(amount):,.{decimals}f}"
    digits = digits.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp {digits}"


def format_date(value: Optional[datetime], with_time: bool = False) -> str:
    if value is None:
        return "-"
    return value.strftime("%d %b %Y %H:%M" if with_time else "%d %b %Y")


def status_label(status: Optional[str]) -> str:
    if not status:
        return "Pending"
    return status[:1].upper() + status[1:]


def can_order(product: Product, authenticated: bool, user: Optional[User]) -> bool:
    """
    Whether the catalog's order button is enabled. Anonymous visitors get an
    enabled button that leads to the login page instead.
    """
    if not product.in_stock:
        return False
    if authenticated and user is not None and user.is_admin:
        return False
    return True


def _timestamp(value: Optional[datetime]) -> float:
    return value.timestamp() if value else 0.0


def sort_users(
    users: Sequence[User],
    by: Literal["date", "username"] = "date",
    order: Literal["asc", "desc"] = "desc",
) -> List[User]:
    reverse = order == "desc"
    if by == "username":
        return sorted(users, key=lambda u: u.username.casefold(), reverse=reverse)
    return sorted(users, key=lambda u: _timestamp(u.created_at), reverse=reverse)


def sort_orders(
    orders: Sequence[Order],
    by: Literal["date", "total"] = "date",
    order: Literal["asc", "desc"] = "desc",
) -> List[Order]:
    reverse = order == "desc"
    if by == "total":
        return sorted(orders, key=lambda o: o.total_amount, reverse=reverse)
    return sorted(orders, key=lambda o: _timestamp(o.created_at), reverse=reverse)


def describe_items(order: Order) -> str:
    if not order.items:
        return "No items"
    return ", ".join(
        f"{item.product_name or 'Product removed'} x {item.quantity}"
        for item in order.items
    )
