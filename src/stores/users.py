from __future__ import annotations

from typing import Any, Dict, List, Optional

from api import endpoints
from api.models import User
from stores.base import Store


class UserStore(Store[User]):
    def __init__(self, gateway) -> None:
        super().__init__(gateway)
        self.total = 0
        self.page = 1
        self.limit = 10

    @property
    def users(self) -> List[User]:
        return self.items

    async def fetch_all(self, page: int = 1, limit: int = 10) -> Optional[List[User]]:
        async def op():
            self.items, self.total = await endpoints.list_users(
                self.gateway, page, limit
            )
            self.page, self.limit = page, limit
            return self.items

        return await self._run(op, "Error fetching users")

    async def create(self, data: Dict[str, Any]) -> Optional[User]:
        async def op():
            user = await endpoints.create_user(self.gateway, data)
            self._append(user)
            return user

        return await self._run(op, "Error creating user")

    async def update(self, user_id: str, patch: Dict[str, Any]) -> Optional[User]:
        async def op():
            user = await endpoints.update_user(self.gateway, user_id, patch)
            self._replace(user)
            return user

        return await self._run(op, "Error updating user")

    async def delete(self, user_id: str) -> bool:
        async def op():
            await endpoints.delete_user(self.gateway, user_id)
            self._remove(user_id)
            return True

        return bool(await self._run(op, "Error deleting user"))
