from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from fwupload.errors import AlreadyInProgress, FwUploadError, SourceSelectionCancelled
from fwupload.logging_context import new_run_id, run_id_var
from fwupload.schemas import ArtifactSource, ReleaseInfo, WorkflowSnapshot, WorkflowState
from fwupload.services.presign import PresignService
from fwupload.services.transfer import TransferEngine
from fwupload.sources.base import SourceSelector


log = logging.getLogger(__name__)

Listener = Callable[[WorkflowSnapshot], None]


class UploadOrchestrator:
    """
    Runs one firmware upload at a time: select -> presign -> PUT -> register.

    State is only mutated here. Observers get a WorkflowSnapshot on every state or
    progress change. A run never retries on its own; after `succeeded`/`failed` the
    caller acknowledges and may `start` again, which always asks for a fresh grant.
    """

    def __init__(self, selector: SourceSelector, presign: PresignService, transfer: TransferEngine):
        self.selector = selector
        self.presign = presign
        self.transfer = transfer

        self._state = WorkflowState.IDLE
        self._progress = 0.0
        self._uploading = False
        self._reason: str | None = None
        self._result: dict[str, Any] | None = None
        self._listeners: list[Listener] = []

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def progress(self) -> float:
        return self._progress

    @property
    def uploading(self) -> bool:
        return self._uploading

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def result(self) -> dict[str, Any] | None:
        return self._result

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            state=self._state,
            progress=self._progress,
            uploading=self._uploading,
            reason=self._reason,
            result=self._result,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def start(self, release: ReleaseInfo) -> WorkflowSnapshot:
        if self._state is not WorkflowState.IDLE:
            raise AlreadyInProgress(self._state.value)

        token = run_id_var.set(new_run_id())
        try:
            self._progress = 0.0
            self._uploading = True
            self._reason = None
            self._result = None
            self._set_state(WorkflowState.SELECTING_SOURCE)

            try:
                source = await self.selector.select()
            except SourceSelectionCancelled:
                source = None
            except asyncio.CancelledError:
                self._uploading = False
                self._set_state(WorkflowState.IDLE)
                raise
            except (FwUploadError, OSError, ValueError) as e:
                return self._finish(WorkflowState.FAILED, reason=f"Could not open file: {e}")
            except Exception as e:
                log.exception("Unexpected error while selecting a source")
                return self._finish(WorkflowState.FAILED, reason=f"Unexpected error: {e}")

            if source is None:
                log.info("Source selection cancelled")
                self._uploading = False
                self._set_state(WorkflowState.IDLE)
                return self.snapshot()

            try:
                return await self._run(source, release)
            finally:
                _discard(source)
        finally:
            run_id_var.reset(token)

    def acknowledge(self) -> WorkflowSnapshot:
        if self._state.is_terminal:
            self._reason = None
            self._result = None
            self._progress = 0.0
            self._set_state(WorkflowState.IDLE)
        elif self._state is not WorkflowState.IDLE:
            raise AlreadyInProgress(self._state.value)
        return self.snapshot()

    async def _run(self, source: ArtifactSource, release: ReleaseInfo) -> WorkflowSnapshot:
        try:
            self._set_state(WorkflowState.PRESIGNING)
            grant = await self.presign.request_presign(source.name, source.content_type, source.size_bytes)

            self._set_state(WorkflowState.TRANSFERRING)
            await self.transfer.transfer(grant.upload_url, source.content, source.content_type, self._on_progress)
            self._on_progress(1.0)

            self._set_state(WorkflowState.REGISTERING_METADATA)
            result = await self.presign.register_firmware(grant, source.size_bytes, release)
        except FwUploadError as e:
            log.warning("Upload failed in %s: %s", self._state.value, e)
            return self._finish(WorkflowState.FAILED, reason=str(e))
        except asyncio.CancelledError:
            self._finish(WorkflowState.FAILED, reason="Upload cancelled")
            raise
        except Exception as e:
            log.exception("Unexpected error in %s", self._state.value)
            return self._finish(WorkflowState.FAILED, reason=f"Unexpected error: {e}")

        log.info("Upload complete: %s", source.name)
        return self._finish(WorkflowState.SUCCEEDED, result=result)

    def _on_progress(self, value: float) -> None:
        if self._state is not WorkflowState.TRANSFERRING:
            return
        value = min(1.0, max(0.0, float(value)))
        # Never step backwards within one transfer.
        if value <= self._progress:
            return
        self._progress = value
        self._notify()

    def _finish(
        self,
        state: WorkflowState,
        reason: str | None = None,
        result: dict[str, Any] | None = None,
    ) -> WorkflowSnapshot:
        self._uploading = False
        self._progress = 0.0
        self._reason = reason
        self._result = result
        self._set_state(state)
        return self.snapshot()

    def _set_state(self, state: WorkflowState) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                log.exception("Workflow listener failed")


def _discard(source: ArtifactSource) -> None:
    close = getattr(source.content, "close", None)
    if callable(close):
        close()
