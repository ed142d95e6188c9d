from __future__ import annotations

import json

import httpx
import pytest

from fwupload.errors import RequestError
from fwupload.schemas import PresignGrant, ReleaseInfo
from fwupload.services.api_client import ApiClient
from fwupload.services.presign import PresignService
from tests.conftest import FakeTokens


def _service(settings, handler) -> PresignService:
    return PresignService(ApiClient(settings, FakeTokens("t"), transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_request_presign_posts_filename_type_size(settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"upload_url": "https://s3/x", "blob_url": "https://cdn/x"})

    grant = await _service(settings, handler).request_presign("fw.bin", "application/octet-stream", 1024)
    assert seen["path"] == "/api/v1/firmwares/presign"
    assert seen["body"] == {"filename": "fw.bin", "content_type": "application/octet-stream", "size": 1024}
    assert grant.upload_url == "https://s3/x"
    assert grant.final_url == "https://cdn/x"


@pytest.mark.asyncio
async def test_request_presign_rejected(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="quota exceeded")

    with pytest.raises(RequestError, match="^403 quota exceeded$"):
        await _service(settings, handler).request_presign("fw.bin", "application/octet-stream", 1)


@pytest.mark.asyncio
async def test_malformed_grant_is_request_error(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"upload_url": "https://s3/x"})

    with pytest.raises(RequestError, match="Malformed presign response"):
        await _service(settings, handler).request_presign("fw.bin", "application/octet-stream", 1)


@pytest.mark.asyncio
async def test_register_firmware_payload(settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"id": 42, "version": "1.2.0"})

    grant = PresignGrant(upload_url="https://s3/x", blob_url="https://cdn/x")
    release = ReleaseInfo(version="1.2.0", model="modelX", checksum="sha256:abc", signed_by="ci-signing-key")
    record = await _service(settings, handler).register_firmware(grant, 2048, release)

    assert seen["path"] == "/api/v1/firmwares"
    assert seen["body"] == {
        "version": "1.2.0",
        "model": "modelX",
        "blob_url": "https://cdn/x",
        "checksum": "sha256:abc",
        "size": 2048,
        "signed_by": "ci-signing-key",
    }
    assert record == {"id": 42, "version": "1.2.0"}
