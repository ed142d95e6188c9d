from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ArtifactSource(BaseModel):
    """A picked artifact: what to call it, what it is, and how to read it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    content_type: str = Field(min_length=1)
    size_bytes: int = Field(ge=0)
    # bytes or a binary file object; the transfer engine streams it as-is.
    content: Any = Field(repr=False)


class PresignRequest(BaseModel):
    filename: str
    content_type: str
    size: int


class PresignGrant(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    upload_url: str = Field(min_length=1)
    final_url: str = Field(alias="blob_url", min_length=1)


class ReleaseInfo(BaseModel):
    """Caller-supplied metadata registered alongside the uploaded artifact."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(min_length=1)
    model: str = Field(min_length=1)
    # Passed through opaquely, e.g. "sha256:ab12...".
    checksum: str = Field(min_length=1)
    signed_by: str = Field(min_length=1)


class FirmwareRegistration(BaseModel):
    version: str
    model: str
    blob_url: str
    checksum: str
    size: int
    signed_by: str


class WorkflowState(str, enum.Enum):
    IDLE = "idle"
    SELECTING_SOURCE = "selecting_source"
    PRESIGNING = "presigning"
    TRANSFERRING = "transferring"
    REGISTERING_METADATA = "registering_metadata"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowState.SUCCEEDED, WorkflowState.FAILED)


class WorkflowSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: WorkflowState
    progress: float = Field(ge=0.0, le=1.0)
    uploading: bool = False
    reason: str | None = None
    result: dict[str, Any] | None = None
