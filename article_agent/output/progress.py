from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Literal, Optional

from ..utils.logging import get_logger

logger = get_logger("ag.output.progress")

GenerationStatus = Literal[
    "searching",
    "selecting",
    "generating",
    "retrying",
    "creating-thumbnail",
    "saving",
    "complete",
    "error",
]


@dataclass(frozen=True, slots=True)
class GenerationProgress:
    status: GenerationStatus
    message: str
    progress: int
    error: Optional[str] = None


ProgressListener = Callable[[GenerationProgress], None]


class ProgressEmitter:
    """Fan progress events out to listeners for a single pipeline run.

    Listener exceptions are logged and swallowed so a broken UI hook can never
    abort generation. Percentages never go backwards within one emitter.
    """

    def __init__(self, listeners: Iterable[ProgressListener] = ()) -> None:
        self._listeners: List[ProgressListener] = list(listeners)
        self._last = 0

    @property
    def last_progress(self) -> int:
        return self._last

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(
        self,
        status: GenerationStatus,
        message: str,
        progress: Optional[int] = None,
        *,
        error: Optional[str] = None,
    ) -> GenerationProgress:
        value = self._last if progress is None else max(self._last, min(100, int(progress)))
        self._last = value
        event = GenerationProgress(status=status, message=message, progress=value, error=error)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001 - listeners must never break the pipeline
                logger.exception("Progress listener %r raised; ignoring", listener)
        return event


class ProgressRecorder:
    """Listener that keeps every event, handy for reports and tests."""

    def __init__(self) -> None:
        self.events: List[GenerationProgress] = []

    def __call__(self, event: GenerationProgress) -> None:
        self.events.append(event)

    def statuses(self) -> List[str]:
        return [e.status for e in self.events]

    def count(self, status: GenerationStatus) -> int:
        return sum(1 for e in self.events if e.status == status)


def log_progress(event: GenerationProgress) -> None:
    if event.status == "error":
        logger.error("[%3d%%] %s: %s", event.progress, event.message, event.error or "")
    else:
        logger.info("[%3d%%] %s", event.progress, event.message)
