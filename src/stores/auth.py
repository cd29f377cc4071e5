from __future__ import annotations

from typing import Any, Dict, Optional

from api import endpoints
from api.credentials import CredentialStore
from api.errors import SESSION_EXPIRED_MESSAGE, GatewayError
from api.models import User
from stores.base import Store
from utils.logger import get_logger

_logger = get_logger(__name__)


class AuthStore(Store[User]):
    """
    The session: stored credentials, the logged in user and whether the
    backend accepted us. Reuses the loading/error bookkeeping of Store but
    keeps no collection.
    """

    def __init__(self, gateway) -> None:
        super().__init__(gateway)
        self.user: Optional[User] = None
        self.token: Optional[str] = None
        self.is_authenticated = False

    @property
    def credentials(self) -> CredentialStore:
        return self.gateway.credentials

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def _reset(self) -> None:
        self.user = None
        self.token = None
        self.is_authenticated = False

    async def _start_session(self, payload: Dict[str, Any]) -> User:
        token = payload.get("token")
        user = payload.get("user")
        if not token or not isinstance(user, dict):
            raise GatewayError("The server did not return a session")
        await self.credentials.save(token, payload.get("refreshToken"))
        self.token = token
        self.user = User.from_dict(user)
        self.is_authenticated = True
        _logger.info(f"Signed in as {self.user.username} ({self.user.role})")
        return self.user

    async def bootstrap(self) -> Optional[User]:
        """
        Resume a session from the stored token. Meant to run in a worker that
        is cancelled if the app goes away first; cancellation leaves no error.
        """
        self.token = await self.credentials.get_access()
        self.is_authenticated = bool(self.token)
        if not self.token:
            return None
        return await self.fetch_current_user()

    async def login(self, username: str, password: str) -> Optional[User]:
        async def op():
            payload = await endpoints.login(self.gateway, username, password)
            return await self._start_session(payload)

        return await self._run(op, "Login failed")

    async def register(self, username: str, password: str) -> Optional[User]:
        async def op():
            payload = await endpoints.register(self.gateway, username, password)
            return await self._start_session(payload)

        user = await self._run(op, "Registration failed")
        if user is None:
            self._reset()
        return user

    async def fetch_current_user(self) -> Optional[User]:
        async def op():
            self.user = await endpoints.current_user(self.gateway)
            self.is_authenticated = True
            return self.user

        user = await self._run(op, "Authentication failed")
        if user is None:
            await self.credentials.clear_access()
            self._reset()
        return user

    async def logout(self) -> None:
        await self.credentials.clear()
        self._reset()
        self.error = None
        _logger.info("Signed out.")

    def invalidate(self) -> None:
        """The gateway gave up refreshing; credentials are already wiped."""
        self._reset()
        self.error = SESSION_EXPIRED_MESSAGE
