# persisted credential pair and last route, kept in a local sqlite file
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

ACCESS_KEY = "token"
REFRESH_KEY = "refreshToken"
LAST_ROUTE_KEY = "lastRoute"

LOGIN_ROUTE = "/login"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS client_storage (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class CredentialStore:
    """
    The only shared mutable resource of the client. Writers are login,
    registration, refresh, logout and refresh failure; everybody else reads.
    """

    def __init__(self, path: str):
        self.path = path
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def connect(self):
        """Yield an aiosqlite connection, creating the storage table on first use."""
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)

        conn = await aiosqlite.connect(self.path)
        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    _logger.debug(f"Initializing client storage at {self.path}...")
                    await conn.executescript(_SCHEMA)
                    await conn.commit()
                    self._initialized = True
        try:
            yield conn
        finally:
            await conn.close()

    async def _get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute(
                "SELECT value FROM client_storage WHERE key = ?;", (key,)
            )
            row = await cur.fetchone()
            await cur.close()
            return row[0] if row else None

    async def _set(self, key: str, value: str) -> None:
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT INTO client_storage (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )
            await conn.commit()

    async def _delete(self, *keys: str) -> None:
        async with self.connect() as conn:
            await conn.executemany(
                "DELETE FROM client_storage WHERE key = ?;", [(k,) for k in keys]
            )
            await conn.commit()

    # ---------------------------
    # Credentials
    # ---------------------------

    async def get_access(self) -> Optional[str]:
        return await self._get(ACCESS_KEY)

    async def get_refresh(self) -> Optional[str]:
        return await self._get(REFRESH_KEY)

    async def save(self, access: str, refresh: Optional[str] = None) -> None:
        """Store a new access credential, and the refresh one when given."""
        await self._set(ACCESS_KEY, access)
        if refresh:
            await self._set(REFRESH_KEY, refresh)

    async def clear_access(self) -> None:
        await self._delete(ACCESS_KEY)

    async def clear(self) -> None:
        """Forget both credentials. The last route survives a logout."""
        await self._delete(ACCESS_KEY, REFRESH_KEY)

    # ---------------------------
    # Navigation
    # ---------------------------

    async def get_last_route(self) -> Optional[str]:
        return await self._get(LAST_ROUTE_KEY)

    async def remember_route(self, route: str) -> None:
        if route == LOGIN_ROUTE:
            return
        await self._set(LAST_ROUTE_KEY, route)
