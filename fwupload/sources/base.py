from __future__ import annotations

from typing import Protocol

from fwupload.schemas import ArtifactSource


class SourceSelector(Protocol):
    async def select(self) -> ArtifactSource | None:
        """Returns the picked artifact; None or SourceSelectionCancelled means the user backed out."""
        ...
