import queue
import threading

from avatar_pipeline.logging.logger import Log
from avatar_pipeline.upload.models import ProgressListener, UploadProgressEvent, UploadStage


class ProgressReporter:
    """Emits progress events for one upload call.

    Progress never decreases within a call: a lower value than the last one
    emitted is raised to the last value. Listener exceptions are logged and
    never reach the pipeline.
    """

    def __init__(self, listener: ProgressListener | None = None) -> None:
        self._listener = listener
        self._last_progress = 0

    @property
    def last_progress(self) -> int:
        return self._last_progress

    def emit(
        self,
        stage: UploadStage,
        progress: int,
        message: str,
        current_file: str | None = None,
    ) -> UploadProgressEvent:
        progress = max(self._last_progress, min(100, progress))
        self._last_progress = progress
        event = UploadProgressEvent(
            stage=stage,
            progress=progress,
            message=message,
            current_file=current_file,
        )
        Log.debug(f"Upload progress {stage.value} {progress}%: {message}")
        if self._listener is not None:
            try:
                self._listener(event)
            except Exception as exc:
                Log.warning(f"Progress listener raised, ignoring: {exc}")
        return event


class ProgressRecorder:
    """Listener that keeps every event in emission order."""

    def __init__(self) -> None:
        self.events: list[UploadProgressEvent] = []

    def __call__(self, event: UploadProgressEvent) -> None:
        self.events.append(event)

    @property
    def stages(self) -> list[UploadStage]:
        return [e.stage for e in self.events]

    @property
    def progress_values(self) -> list[int]:
        return [e.progress for e in self.events]


class QueuedProgressListener:
    """Delivers events to a wrapped listener from a background thread.

    The pipeline only enqueues, so a slow listener delays nothing but its own
    notifications. Call close() to stop the delivery thread.
    """

    _STOP = object()

    def __init__(self, listener: ProgressListener) -> None:
        self._listener = listener
        self._queue: queue.Queue[object] = queue.Queue()
        self._thread = threading.Thread(
            target=self._deliver,
            name="avatar-progress",
            daemon=True,
        )
        self._thread.start()

    def __call__(self, event: UploadProgressEvent) -> None:
        self._queue.put(event)

    def close(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop after delivering already queued events.

        With wait=False the remaining events are still delivered, but the
        caller does not block on the listener.
        """
        self._queue.put(self._STOP)
        if wait:
            self._thread.join(timeout)

    def _deliver(self) -> None:
        while True:
            item = self._queue.get()
            if item is self._STOP:
                return
            try:
                self._listener(item)  # type: ignore[arg-type]
            except Exception as exc:
                Log.warning(f"Queued progress listener raised, ignoring: {exc}")
