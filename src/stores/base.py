from __future__ import annotations

from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from api.errors import GatewayError, describe
from api.gateway import RequestGateway
from utils.logger import get_logger

T = TypeVar("T")
R = TypeVar("R")

_logger = get_logger(__name__)


class Store(Generic[T]):
    """
    Client-side cache of one backend collection plus the operations that
    fill and mutate it.

    Operations never raise gateway failures: they store a readable message
    in `error` and return None, so views only have to look at `error`.
    Concurrent fetches are not coalesced; whichever response lands last
    becomes the cache.
    """

    def __init__(self, gateway: RequestGateway) -> None:
        self.gateway = gateway
        self.items: List[T] = []
        self.loading = False
        self.error: Optional[str] = None

    def clear_error(self) -> None:
        self.error = None

    async def _run(
        self, operation: Callable[[], Awaitable[R]], fallback: str
    ) -> Optional[R]:
        self.loading = True
        self.error = None
        try:
            return await operation()
        except GatewayError as exc:
            self.error = describe(exc, fallback)
            _logger.error(f"{type(self).__name__}: {fallback} ({exc.message})")
            return None
        finally:
            self.loading = False

    # ---------------------------
    # Cache reconciliation
    # ---------------------------

    @staticmethod
    def _key(item: T) -> str:
        return getattr(item, "id")

    def _index_of(self, item_id: str) -> int:
        for i, item in enumerate(self.items):
            if self._key(item) == item_id:
                return i
        return -1

    def _append(self, item: T) -> None:
        index = self._index_of(self._key(item))
        if index == -1:
            self.items.append(item)
        else:
            self.items[index] = item

    def _replace(self, item: T) -> None:
        index = self._index_of(self._key(item))
        if index != -1:
            self.items[index] = item

    def _remove(self, item_id: str) -> None:
        self.items = [i for i in self.items if self._key(i) != item_id]

    def get(self, item_id: str) -> Optional[T]:
        index = self._index_of(item_id)
        return self.items[index] if index != -1 else None
