from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from fwupload.errors import RequestError
from fwupload.schemas import FirmwareRegistration, PresignGrant, PresignRequest, ReleaseInfo
from fwupload.services.api_client import ApiClient


log = logging.getLogger(__name__)

PRESIGN_PATH = "/api/v1/firmwares/presign"
FIRMWARES_PATH = "/api/v1/firmwares"


class PresignService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def request_presign(self, name: str, content_type: str, size_bytes: int) -> PresignGrant:
        """
        Asks the backend for a single-use upload destination.
        The server is the source of truth for validation (quota, allowed types, size).
        """
        body = PresignRequest(filename=name, content_type=content_type, size=size_bytes)
        data = await self.api.post(PRESIGN_PATH, body.model_dump())
        try:
            grant = PresignGrant.model_validate(data)
        except ValidationError as e:
            raise RequestError(None, f"Malformed presign response: {data!r}") from e
        log.info("Presigned upload for %s (%d bytes)", name, size_bytes)
        return grant

    async def register_firmware(self, grant: PresignGrant, size_bytes: int, release: ReleaseInfo) -> dict[str, Any]:
        payload = FirmwareRegistration(
            version=release.version,
            model=release.model,
            blob_url=grant.final_url,
            checksum=release.checksum,
            size=size_bytes,
            signed_by=release.signed_by,
        )
        data = await self.api.post(FIRMWARES_PATH, payload.model_dump())
        log.info("Registered firmware %s/%s", release.model, release.version)
        return data if isinstance(data, dict) else {"response": data}
