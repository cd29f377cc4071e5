from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from api import endpoints
from api.endpoints import SPREADSHEET_EXTENSIONS
from api.models import Product
from stores.base import Store


class ProductStore(Store[Product]):
    @property
    def products(self) -> List[Product]:
        return self.items

    async def fetch_all(self) -> Optional[List[Product]]:
        async def op():
            self.items = await endpoints.list_products(self.gateway)
            return self.items

        return await self._run(op, "Failed to fetch products")

    async def create(self, data: Dict[str, Any]) -> Optional[Product]:
        async def op():
            product = await endpoints.create_product(self.gateway, data)
            self._append(product)
            return product

        return await self._run(op, "Failed to create product")

    async def update(self, product_id: str, patch: Dict[str, Any]) -> Optional[Product]:
        async def op():
            product = await endpoints.update_product(self.gateway, product_id, patch)
            self._replace(product)
            return product

        return await self._run(op, "Failed to update product")

    async def delete(self, product_id: str) -> bool:
        async def op():
            await endpoints.delete_product(self.gateway, product_id)
            self._remove(product_id)
            return True

        return bool(await self._run(op, "Failed to delete product"))

    async def import_spreadsheet(self, path: str) -> bool:
        """
        Upload an Excel file and reload the catalog, imported rows only
        exist server side.
        """
        if not path.lower().endswith(SPREADSHEET_EXTENSIONS):
            self.error = "Please upload an Excel file (.xlsx or .xls)"
            return False
        if not os.path.isfile(path):
            self.error = f"File not found: {path}"
            return False

        async def op():
            await endpoints.import_products(self.gateway, path)
            return True

        if not await self._run(op, "Failed to import products"):
            return False
        await self.fetch_all()
        return self.error is None
