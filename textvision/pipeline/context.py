import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from textvision.documents.models import DocumentResult, ProcessingOptions, UploadedDocument
from textvision.logging.logger import Log
from textvision.pipeline.events import ProgressReporter


class PipelineState(str, enum.Enum):
    ANALYZING = "analyzing"
    CONVERTING = "converting"
    OCR_PROCESSING = "ocr_processing"
    AGGREGATING = "aggregating"
    DEGRADED_STRATEGY = "degraded_strategy"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(slots=True)
class StrategyContext:
    """Per-invocation state shared by the strategies of one pipeline run."""

    document: UploadedDocument
    options: ProcessingOptions
    report: ProgressReporter
    states: list[PipelineState] = field(default_factory=list)

    @property
    def state(self) -> PipelineState | None:
        return self.states[-1] if self.states else None

    @property
    def state_trail(self) -> tuple[str, ...]:
        return tuple(state.value for state in self.states)

    def transition(self, state: PipelineState) -> None:
        previous = self.state
        self.states.append(state)
        Log.debug(
            f"'{self.document.filename}': {previous.value if previous else 'start'} -> {state.value}"
        )


class BaseStrategy(ABC):
    """One complete attempt at turning a document into a DocumentResult."""

    name: str = ""
    degraded: bool = False

    @abstractmethod
    def attempt(self, context: StrategyContext) -> DocumentResult:
        """Produce a result or raise StrategyError so the next strategy runs."""
        raise NotImplementedError
