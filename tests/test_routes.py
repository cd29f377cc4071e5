import unittest

import fake_backend  # noqa: F401  (puts src/ on sys.path)

from api.models import User
from utils.routes import (
    ADMIN_MENU,
    CUSTOMER_MENU,
    guard,
    menu_for,
    mode_for,
    normalize,
    route_for,
    start_route,
)

ADMIN = User(id="u1", username="root", role="admin")
CUSTOMER = User(id="u2", username="budi")


class RoutesTestCase(unittest.TestCase):
    def test_normalize(self):
        self.assertEqual(normalize("/"), "/login")
        self.assertEqual(normalize(None), "/login")
        self.assertEqual(normalize("/admin"), "/admin/dashboard")
        self.assertEqual(normalize("/admin/"), "/admin/dashboard")
        self.assertEqual(normalize("/orders/"), "/orders")
        self.assertEqual(normalize("/nowhere"), "/login")

    def test_anonymous_visitors(self):
        self.assertEqual(guard("/products", False, None), "/products")
        self.assertEqual(guard("/orders", False, None), "/login")
        self.assertEqual(guard("/admin/users", False, None), "/login")
        self.assertEqual(guard("/login", False, None), "/login")

    def test_customers_are_kept_out_of_admin(self):
        self.assertEqual(guard("/orders", True, CUSTOMER), "/orders")
        self.assertEqual(guard("/admin/orders", True, CUSTOMER), "/products")
        self.assertEqual(guard("/admin", True, CUSTOMER), "/products")

    def test_admins(self):
        self.assertEqual(guard("/admin", True, ADMIN), "/admin/dashboard")
        self.assertEqual(guard("/admin/users", True, ADMIN), "/admin/users")

    def test_login_page_redirects_signed_in_users(self):
        self.assertEqual(guard("/login", True, CUSTOMER), "/products")

    def test_start_route(self):
        self.assertEqual(start_route(None, True, CUSTOMER), "/products")
        self.assertEqual(start_route("/admin/orders", True, ADMIN), "/admin/orders")
        self.assertEqual(start_route("/admin/orders", True, CUSTOMER), "/products")
        self.assertEqual(start_route("/orders", False, None), "/login")

    def test_modes_round_trip(self):
        self.assertEqual(mode_for("/admin/products"), "admin_products")
        self.assertEqual(route_for("admin_products"), "/admin/products")
        self.assertIsNone(mode_for("/login"))
        self.assertIsNone(route_for("missing"))

    def test_menu_depends_on_role(self):
        self.assertIs(menu_for(ADMIN), ADMIN_MENU)
        self.assertIs(menu_for(CUSTOMER), CUSTOMER_MENU)
        self.assertIs(menu_for(None), CUSTOMER_MENU)


if __name__ == "__main__":
    unittest.main()
