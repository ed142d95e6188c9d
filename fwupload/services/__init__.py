from __future__ import annotations

import httpx

from fwupload.config import Settings
from fwupload.services.api_client import ApiClient, TokenSource
from fwupload.services.orchestrator import UploadOrchestrator
from fwupload.services.presign import PresignService
from fwupload.services.transfer import TransferEngine
from fwupload.sources.base import SourceSelector


def build_orchestrator(
    settings: Settings,
    selector: SourceSelector,
    credentials: TokenSource,
    transport: httpx.AsyncBaseTransport | None = None,
) -> UploadOrchestrator:
    api = ApiClient(settings, credentials, transport=transport)
    engine = TransferEngine(
        timeout_s=settings.transfer_timeout_s,
        chunk_size=settings.transfer_chunk_size,
        transport=transport,
    )
    return UploadOrchestrator(selector, PresignService(api), engine)
