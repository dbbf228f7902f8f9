from collections.abc import Callable
from dataclasses import dataclass, field
from typing import ClassVar

from textvision.logging.logger import Log


@dataclass(frozen=True)
class Analyzing:
    """Pipeline started inspecting the document."""

    status: ClassVar[str] = "analyzing"
    message: str = "Analyzing document..."


@dataclass(frozen=True)
class Converting:
    """Pages are about to be rasterized."""

    status: ClassVar[str] = "converting"
    total_pages: int = 0
    message: str = "Converting PDF pages to images..."


@dataclass(frozen=True)
class Recognizing:
    """One page finished recognition (successfully or not)."""

    status: ClassVar[str] = "recognizing"
    current: int = 0
    total: int = 0
    page_number: int = 0
    succeeded: bool = True
    message: str = field(default="")

    def __post_init__(self) -> None:
        if not self.message:
            object.__setattr__(
                self, "message", f"Processed page {self.current}/{self.total}"
            )

    @property
    def progress(self) -> int:
        """Completion percentage of the batch."""
        if self.total <= 0:
            return 0
        return round(self.current / self.total * 100)


@dataclass(frozen=True)
class Degraded:
    """The pipeline switched to a degraded strategy."""

    status: ClassVar[str] = "degraded"
    reason: str = ""
    message: str = "Switching to degraded processing..."


@dataclass(frozen=True)
class Complete:
    """A DocumentResult is ready."""

    status: ClassVar[str] = "complete"
    strategy: str = ""
    message: str = "Processing complete"


ProgressEvent = Analyzing | Converting | Recognizing | Degraded | Complete
ProgressCallback = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Delivers events to a caller callback; a failing callback never stops the pipeline."""

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback

    def __call__(self, event: ProgressEvent) -> None:
        Log.debug(f"Progress [{event.status}]: {event.message}")
        if self._callback is None:
            return
        try:
            self._callback(event)
        except Exception:
            Log.exception(f"Progress callback raised on '{event.status}' event; continuing")
