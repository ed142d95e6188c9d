from __future__ import annotations

from fwupload.sources.base import SourceSelector
from fwupload.sources.local import DEFAULT_CONTENT_TYPE, DEFAULT_NAME, LocalFileSelector

__all__ = ["SourceSelector", "LocalFileSelector", "DEFAULT_NAME", "DEFAULT_CONTENT_TYPE"]
