# aquadash/services/asset_service.py
from typing import Any, Optional

from aquadash.schemas.assets import Asset, AssetStatus
from aquadash.services.base import CrudService, form_fields


class AssetService(CrudService[Asset]):
    """/assets - create and update are multipart (optional image)"""
    path = "/assets"
    model = Asset
    noun = "asset"
    plural = "assets"

    def create(self, fields: dict[str, Any], image: Optional[tuple] = None) -> Asset:
        files = {"assetImg": image} if image else None
        body = self.api.post(self.path, data=form_fields(fields), files=files, fallback="Failed to create asset")
        return self._one(body)

    def update(self, id: str, fields: dict[str, Any], image: Optional[tuple] = None) -> Asset:
        files = {"assetImg": image} if image else None
        body = self.api.put(f"{self.path}/{id}", data=form_fields(fields), files=files, fallback="Failed to update asset")
        return self._one(body)

    def update_status(self, id: str, status: AssetStatus) -> Asset:
        body = self.api.put(f"{self.path}/status/{id}", {"status": status.value}, fallback="Failed to update asset status")
        return self._one(body)
