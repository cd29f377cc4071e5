import asyncio

import httpx

from fake_backend import BackendTestCase, body

from api.errors import (
    ApiError,
    AuthorizationError,
    RefreshError,
    TransportError,
)

PRODUCTS = [{"_id": "p1", "name": "Mouse", "price": 10, "stock": 2}]


class GatewayTestCase(BackendTestCase):
    async def wait_for_queue(self, size: int) -> None:
        while self.gateway.pending_count < size:
            await asyncio.sleep(0.001)

    # ---------- Plain requests ----------

    async def test_attaches_bearer_token_when_stored(self):
        await self.credentials.save("tok-1", "ref-1")
        self.backend.route("GET", "/api/products", httpx.Response(200, json=PRODUCTS))

        data = await self.gateway.get("/api/products")

        self.assertEqual(data, PRODUCTS)
        (request,) = self.backend.requests
        self.assertEqual(request.headers["Authorization"], "Bearer tok-1")

    async def test_no_authorization_header_without_token(self):
        self.backend.route("GET", "/api/products", httpx.Response(200, json=[]))

        await self.gateway.get("/api/products")

        self.assertNotIn("Authorization", self.backend.requests[0].headers)

    async def test_backend_errors_pass_through_with_payload(self):
        await self.credentials.save("tok-1")
        self.backend.route(
            "POST",
            "/api/products",
            httpx.Response(400, json={"message": "Name is required"}),
        )

        with self.assertRaises(ApiError) as ctx:
            await self.gateway.post("/api/products", json={})

        self.assertEqual(ctx.exception.status, 400)
        self.assertEqual(ctx.exception.message, "Name is required")
        self.assertEqual(ctx.exception.payload, {"message": "Name is required"})
        self.assertEqual(self.backend.calls("POST", "/auth/refresh"), [])

    async def test_transport_failure_is_typed(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        self.backend.route("GET", "/api/products", boom)

        with self.assertRaises(TransportError):
            await self.gateway.get("/api/products")

    async def test_unauthenticated_calls_never_refresh(self):
        await self.credentials.save("tok-1", "ref-1")
        self.backend.route(
            "POST",
            "/auth/login",
            httpx.Response(401, json={"message": "Invalid credentials"}),
        )

        with self.assertRaises(ApiError) as ctx:
            await self.gateway.post("/auth/login", json={}, authenticate=False)

        self.assertIs(type(ctx.exception), ApiError)
        self.assertEqual(ctx.exception.message, "Invalid credentials")
        self.assertNotIn("Authorization", self.backend.requests[0].headers)
        self.assertEqual(self.backend.calls("POST", "/auth/refresh"), [])

    # ---------- Refresh protocol ----------

    async def test_concurrent_401s_share_a_single_refresh(self):
        await self.credentials.save("old", "ref-1")

        def products(request):
            if request.headers.get("Authorization") == "Bearer new":
                return httpx.Response(200, json=PRODUCTS)
            return httpx.Response(401, json={"message": "jwt expired"})

        async def refresh(request):
            # hold the refresh until the two other requests are parked
            await self.wait_for_queue(2)
            return httpx.Response(200, json={"token": "new"})

        self.backend.route("GET", "/api/products", products)
        self.backend.route("POST", "/auth/refresh", refresh)

        results = await asyncio.wait_for(
            asyncio.gather(*(self.gateway.get("/api/products") for _ in range(3))),
            timeout=5,
        )

        self.assertEqual(results, [PRODUCTS] * 3)
        refresh_calls = self.backend.calls("POST", "/auth/refresh")
        self.assertEqual(len(refresh_calls), 1)
        self.assertEqual(body(refresh_calls[0]), {"refreshToken": "ref-1"})
        self.assertNotIn("Authorization", refresh_calls[0].headers)

        replays = [
            r
            for r in self.backend.calls("GET", "/api/products")
            if r.headers["Authorization"] == "Bearer new"
        ]
        self.assertEqual(len(replays), 3)
        self.assertEqual(await self.credentials.get_access(), "new")
        self.assertEqual(await self.credentials.get_refresh(), "ref-1")
        self.assertFalse(self.gateway.refreshing)
        self.assertEqual(self.gateway.pending_count, 0)

    async def test_refresh_stores_rotated_refresh_token(self):
        await self.credentials.save("old", "ref-1")

        def products(request):
            if request.headers.get("Authorization") == "Bearer new":
                return httpx.Response(200, json=[])
            return httpx.Response(401)

        self.backend.route("GET", "/api/products", products)
        self.backend.route(
            "POST",
            "/auth/refresh",
            httpx.Response(200, json={"token": "new", "refreshToken": "ref-2"}),
        )

        self.assertEqual(await self.gateway.get("/api/products"), [])
        self.assertEqual(await self.credentials.get_refresh(), "ref-2")

    async def test_failed_refresh_rejects_everyone_and_ends_session(self):
        await self.credentials.save("old", "ref-1")
        await self.credentials.remember_route("/admin/orders")
        invalidated = []
        self.gateway.subscribe(lambda: invalidated.append(True))

        async def refresh(request):
            await self.wait_for_queue(2)
            return httpx.Response(401, json={"message": "Refresh token expired"})

        self.backend.route("GET", "/api/orders", httpx.Response(401))
        self.backend.route("POST", "/auth/refresh", refresh)

        results = await asyncio.wait_for(
            asyncio.gather(
                *(self.gateway.get("/api/orders") for _ in range(3)),
                return_exceptions=True,
            ),
            timeout=5,
        )

        for result in results:
            self.assertIsInstance(result, RefreshError)
        self.assertIs(results[0], results[1])
        self.assertIs(results[1], results[2])

        self.assertIsNone(await self.credentials.get_access())
        self.assertIsNone(await self.credentials.get_refresh())
        self.assertEqual(await self.credentials.get_last_route(), "/admin/orders")
        self.assertEqual(invalidated, [True])
        self.assertFalse(self.gateway.refreshing)

        # nothing left to refresh with until the next login
        with self.assertRaises(RefreshError):
            await self.gateway.get("/api/orders")
        self.assertEqual(len(self.backend.calls("POST", "/auth/refresh")), 1)

    async def test_missing_refresh_token_fails_without_calling_backend(self):
        await self.credentials.save("old")
        self.backend.route("GET", "/auth/me", httpx.Response(401))

        with self.assertRaises(RefreshError):
            await self.gateway.get("/auth/me")

        self.assertEqual(self.backend.calls("POST", "/auth/refresh"), [])
        self.assertIsNone(await self.credentials.get_access())

    async def test_second_401_after_replay_is_final(self):
        await self.credentials.save("old", "ref-1")
        self.backend.route(
            "GET", "/api/users", httpx.Response(401, json={"message": "Not allowed"})
        )
        self.backend.route(
            "POST", "/auth/refresh", httpx.Response(200, json={"token": "new"})
        )

        with self.assertRaises(AuthorizationError) as ctx:
            await self.gateway.get("/api/users")

        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(len(self.backend.calls("GET", "/api/users")), 2)
        self.assertEqual(len(self.backend.calls("POST", "/auth/refresh")), 1)
        # the new credential is kept, only the request failed
        self.assertEqual(await self.credentials.get_access(), "new")

    async def test_replay_rebuilds_multipart_body(self):
        await self.credentials.save("old", "ref-1")
        seen = []

        async def upload(request):
            seen.append(request.content)
            if request.headers.get("Authorization") == "Bearer new":
                return httpx.Response(201, json={"imported": 2})
            return httpx.Response(401)

        self.backend.route("POST", "/api/products/import", upload)
        self.backend.route(
            "POST", "/auth/refresh", httpx.Response(200, json={"token": "new"})
        )

        files = {"file": ("products.xlsx", b"sheet-bytes", "application/octet-stream")}
        data = await self.gateway.post("/api/products/import", files=files)

        self.assertEqual(data, {"imported": 2})
        self.assertEqual(len(seen), 2)
        self.assertIn(b"sheet-bytes", seen[1])

    # ---------- Late answers and broken refreshes ----------

    async def test_late_401_after_failed_refresh_does_not_refresh_again(self):
        await self.credentials.save("old", "ref-1")
        invalidated = []
        self.gateway.subscribe(lambda: invalidated.append(True))
        hits = []

        async def orders(request):
            hits.append(request)
            if len(hits) == 1:
                while len(hits) < 2:
                    await asyncio.sleep(0.001)
                return httpx.Response(401)
            # answer only once the failed refresh has fully settled
            while not (
                self.backend.calls("POST", "/auth/refresh")
                and not self.gateway.refreshing
            ):
                await asyncio.sleep(0.001)
            return httpx.Response(401)

        self.backend.route("GET", "/api/orders", orders)
        self.backend.route("POST", "/auth/refresh", httpx.Response(401))

        results = await asyncio.wait_for(
            asyncio.gather(
                self.gateway.get("/api/orders"),
                self.gateway.get("/api/orders"),
                return_exceptions=True,
            ),
            timeout=5,
        )

        for result in results:
            self.assertIsInstance(result, RefreshError)
        self.assertEqual(
            [r.headers["Authorization"] for r in hits], ["Bearer old", "Bearer old"]
        )
        self.assertEqual(len(self.backend.calls("POST", "/auth/refresh")), 1)
        self.assertEqual(invalidated, [True])
        self.assertIsNone(await self.credentials.get_refresh())

    async def test_late_401_after_successful_refresh_reuses_new_token(self):
        await self.credentials.save("old", "ref-1")
        stale = []

        async def products(request):
            if request.headers["Authorization"] == "Bearer new":
                return httpx.Response(200, json=PRODUCTS)
            stale.append(request)
            if len(stale) == 1:
                while len(stale) < 2:
                    await asyncio.sleep(0.001)
                return httpx.Response(401)
            while not (
                self.backend.calls("POST", "/auth/refresh")
                and not self.gateway.refreshing
            ):
                await asyncio.sleep(0.001)
            return httpx.Response(401)

        self.backend.route("GET", "/api/products", products)
        self.backend.route(
            "POST", "/auth/refresh", httpx.Response(200, json={"token": "new"})
        )

        results = await asyncio.wait_for(
            asyncio.gather(
                self.gateway.get("/api/products"), self.gateway.get("/api/products")
            ),
            timeout=5,
        )

        self.assertEqual(results, [PRODUCTS, PRODUCTS])
        self.assertEqual(len(self.backend.calls("POST", "/auth/refresh")), 1)

    async def test_refresh_crash_releases_the_in_flight_flag(self):
        await self.credentials.save("old", "ref-1")
        invalidated = []
        self.gateway.subscribe(lambda: invalidated.append(True))

        async def broken_save(access, refresh=None):
            raise OSError("disk full")

        self.credentials.save = broken_save
        self.backend.route("GET", "/api/products", httpx.Response(401))
        self.backend.route(
            "POST", "/auth/refresh", httpx.Response(200, json={"token": "new"})
        )

        with self.assertRaises(RefreshError) as ctx:
            await asyncio.wait_for(self.gateway.get("/api/products"), timeout=5)
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertFalse(self.gateway.refreshing)
        self.assertEqual(self.gateway.pending_count, 0)

        # the next 401 gets its own attempt instead of hanging
        with self.assertRaises(RefreshError):
            await asyncio.wait_for(self.gateway.get("/api/products"), timeout=5)
        self.assertEqual(len(self.backend.calls("POST", "/auth/refresh")), 2)
        self.assertEqual(invalidated, [])
        self.assertEqual(await self.credentials.get_refresh(), "ref-1")

    async def test_refresh_crash_rejects_queued_requests(self):
        await self.credentials.save("old", "ref-1")

        async def broken_get_refresh():
            await self.wait_for_queue(1)
            raise OSError("database is locked")

        self.credentials.get_refresh = broken_get_refresh
        self.backend.route("GET", "/api/orders", httpx.Response(401))

        results = await asyncio.wait_for(
            asyncio.gather(
                self.gateway.get("/api/orders"),
                self.gateway.get("/api/orders"),
                return_exceptions=True,
            ),
            timeout=5,
        )

        self.assertIsInstance(results[0], RefreshError)
        self.assertIs(results[0], results[1])
        self.assertFalse(self.gateway.refreshing)
