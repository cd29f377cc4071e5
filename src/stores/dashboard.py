from __future__ import annotations

import os
from typing import Optional

from api import endpoints
from api.models import DashboardStats
from stores.base import Store

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")


class DashboardStore(Store[DashboardStats]):
    """Holds a single stats snapshot instead of a list."""

    def __init__(self, gateway) -> None:
        super().__init__(gateway)
        self.stats = DashboardStats()

    async def fetch_stats(self) -> Optional[DashboardStats]:
        async def op():
            self.stats = await endpoints.dashboard_stats(self.gateway)
            return self.stats

        return await self._run(op, "Error fetching dashboard stats")


class ShowcaseStore(Store[str]):
    """The storefront's showcase image, managed from the dashboard."""

    def __init__(self, gateway) -> None:
        super().__init__(gateway)
        self.image_url: Optional[str] = None

    async def fetch(self) -> Optional[str]:
        async def op():
            self.image_url = await endpoints.showcase_image(self.gateway)
            return self.image_url

        return await self._run(op, "Error fetching showcase image")

    async def upload(self, path: str) -> Optional[str]:
        if not path.lower().endswith(IMAGE_EXTENSIONS):
            self.error = "Please choose an image file"
            return None
        if not os.path.isfile(path):
            self.error = f"File not found: {path}"
            return None

        async def op():
            self.image_url = await endpoints.upload_showcase_image(self.gateway, path)
            return self.image_url

        return await self._run(op, "Error uploading showcase image")
