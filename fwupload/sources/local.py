from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Callable

from fwupload.errors import SourceSelectionCancelled
from fwupload.schemas import ArtifactSource


log = logging.getLogger(__name__)

DEFAULT_NAME = "firmware.bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LocalFileSelector:
    """
    Picks a firmware image from the local filesystem.

    `path` wins when given; otherwise `ask` is called (e.g. a terminal prompt) and an
    empty answer counts as the user cancelling.
    """

    def __init__(self, path: str | Path | None = None, ask: Callable[[], str | None] | None = None):
        self.path = Path(path) if path else None
        self.ask = ask

    async def select(self) -> ArtifactSource:
        path = self.path
        if path is None and self.ask is not None:
            answer = (await asyncio.to_thread(self.ask) or "").strip()
            path = Path(answer) if answer else None
        if path is None:
            raise SourceSelectionCancelled("No file selected")

        size = path.stat().st_size
        content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
        log.info("Selected %s (%d bytes, %s)", path, size, content_type)
        return ArtifactSource(
            name=path.name or DEFAULT_NAME,
            content_type=content_type,
            size_bytes=size,
            content=path.open("rb"),
        )
