from __future__ import annotations


class FwUploadError(Exception):
    """Base class for errors raised by the upload client."""


class RequestError(FwUploadError):
    """Non-2xx (or unreachable) response from the REST API.

    The raw response body is kept as diagnostic text.
    """

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        self.body = body
        prefix = str(status_code) if status_code is not None else "none"
        super().__init__(f"{prefix} {body}".strip())


class TransferError(FwUploadError):
    """Storage PUT failed; status is None when no response arrived at all."""

    def __init__(self, status: int | None, detail: str = ""):
        self.status = status
        self.detail = detail
        msg = f"Upload failed with status {status if status is not None else 'none'}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class AlreadyInProgress(FwUploadError):
    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Upload already in progress (state={state})")


class SourceSelectionCancelled(FwUploadError):
    """Raised by a source selector when the user backs out. Not a failure."""
