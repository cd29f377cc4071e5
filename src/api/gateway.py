"""
HTTP access to the shop backend.

Every call goes through one `RequestGateway`, which attaches the stored
access token and hides an expired token from its callers: the first request
that sees a 401 exchanges the refresh token for a new access token while any
other request that fails meanwhile waits in a queue, then everything is
replayed once with the new token.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, List, Optional

import httpx

from api.credentials import CredentialStore
from api.errors import (
    ApiError,
    AuthorizationError,
    GatewayError,
    RefreshError,
    TransportError,
)
from utils.logger import get_logger

_logger = get_logger(__name__)

REFRESH_PATH = "/auth/refresh"


@dataclass(frozen=True)
class _Call:
    """Everything needed to (re)build a request; httpx requests are single use."""

    method: str
    url: str
    json: Any = None
    params: Optional[dict] = None
    files: Optional[dict] = None


class RequestGateway:
    """
    One per process. Pass it to every store that talks to the backend.

    Subscribers registered with `subscribe` are called (without arguments)
    when the refresh token is exhausted and the stored credentials have been
    wiped; deciding where to navigate is up to them.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.credentials = credentials
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

        self._refreshing = False
        self._waiters: Deque[asyncio.Future] = deque()
        self._subscribers: List[Callable[[], Any]] = []

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    @property
    def pending_count(self) -> int:
        """Requests parked until the in-flight refresh settles."""
        return len(self._waiters)

    def subscribe(self, callback: Callable[[], Any]) -> None:
        self._subscribers.append(callback)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------------------------
    # Public API
    # ---------------------------

    async def send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[dict] = None,
        files: Optional[dict] = None,
        authenticate: bool = True,
    ) -> httpx.Response:
        """
        Issue a request and return the successful response.

        `authenticate=False` is for the auth endpoints themselves: no bearer
        header and no refresh attempt, a 401 there is just a wrong password.

        Raises ApiError, AuthorizationError, TransportError or RefreshError.
        """
        call = _Call(method.upper(), url, json, params, files)
        token = await self.credentials.get_access() if authenticate else None

        response = await self._dispatch(call, token)
        if response.status_code == 401 and authenticate:
            return await self._recover(call, token)
        return self._check(response)

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        response = await self.send(method, url, **kwargs)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                response.status_code, "Malformed response from server"
            ) from exc

    async def get(self, url: str, **kwargs) -> Any:
        return await self.request_json("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> Any:
        return await self.request_json("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> Any:
        return await self.request_json("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> Any:
        return await self.request_json("DELETE", url, **kwargs)

    # ---------------------------
    # Plumbing
    # ---------------------------

    async def _dispatch(self, call: _Call, token: Optional[str]) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        request = self._client.build_request(
            call.method,
            call.url,
            json=call.json,
            params=call.params,
            files=call.files,
            headers=headers,
        )
        _logger.debug(f"{call.method} {call.url} (token: {bool(token)})")
        try:
            response = await self._client.send(request)
        except httpx.RequestError as exc:
            _logger.warning(f"{call.method} {call.url} failed: {exc!r}")
            raise TransportError(f"Network error: {exc}") from exc

        _logger.debug(f"{call.method} {call.url} -> {response.status_code}")
        return response

    @staticmethod
    def _check(response: httpx.Response) -> httpx.Response:
        if response.is_error:
            error = ApiError.from_response(response)
            _logger.warning(
                f"{response.request.method} {response.request.url.path} "
                f"-> {error.status}: {error.message}"
            )
            raise error
        return response

    async def _recover(self, call: _Call, sent_token: Optional[str]) -> httpx.Response:
        if not self._refreshing:
            # a refresh may have settled while this request was in flight
            current = await self.credentials.get_access()
            if current != sent_token and not self._refreshing:
                if current is None:
                    raise RefreshError("Session ended while the request was in flight")
                _logger.debug(f"{call.method} {call.url} replayed with newer token")
                return await self._replay(call, current)

        if self._refreshing:
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            _logger.debug(f"{call.method} {call.url} queued behind token refresh")
            token = await waiter
            return await self._replay(call, token)

        self._refreshing = True
        try:
            token = await self._refresh()
        except asyncio.CancelledError:
            self._settle(error=RefreshError("Token refresh was cancelled"))
            raise
        except RefreshError as error:
            _logger.warning(f"Token refresh failed, ending session: {error.message}")
            # credentials go while still refreshing, late 401s queue meanwhile
            try:
                await self.credentials.clear()
            finally:
                self._settle(error=error)
            for callback in list(self._subscribers):
                callback()
            raise
        except Exception as exc:
            _logger.error(f"Token refresh crashed: {exc!r}")
            error = RefreshError(f"Token refresh failed: {exc}")
            self._settle(error=error)
            raise error from exc

        self._settle(token=token)
        return await self._replay(call, token)

    async def _refresh(self) -> str:
        refresh_token = await self.credentials.get_refresh()
        if not refresh_token:
            raise RefreshError("No refresh token")

        _logger.info("Access token rejected, refreshing...")
        call = _Call("POST", REFRESH_PATH, json={"refreshToken": refresh_token})
        try:
            data = self._check(await self._dispatch(call, None)).json()
        except GatewayError as exc:
            raise RefreshError(f"Token refresh failed: {exc.message}") from exc
        except ValueError as exc:
            raise RefreshError("Token refresh returned a malformed body") from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise RefreshError("Token refresh returned no token")

        await self.credentials.save(token, data.get("refreshToken"))
        _logger.info("Access token refreshed.")
        return token

    def _settle(self, token: Optional[str] = None, error: Optional[Exception] = None):
        """Leave the refreshing state and wake the queue in arrival order."""
        self._refreshing = False
        waiters, self._waiters = self._waiters, deque()
        for waiter in waiters:
            if waiter.done():  # its caller was cancelled while waiting
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)

    async def _replay(self, call: _Call, token: str) -> httpx.Response:
        response = await self._dispatch(call, token)
        if response.status_code == 401:
            error = AuthorizationError.from_response(response)
            _logger.warning(f"{call.method} {call.url} still unauthorized after refresh")
            raise error
        return self._check(response)
