"""Sequential fail-fast stage runner.

Each stage is a named callable. The runner executes stages in order, turns
the first SwapError/OSError into a failed StageResult and skips every stage
after it. Nothing is retried and nothing is rolled back.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from jarswap.core.protocols import Logger
from jarswap.exceptions import SwapError


@dataclass
class StageResult:
    name: str
    success: bool
    message: str = ""
    error: Optional[BaseException] = None


@dataclass
class PipelineResult:
    """
    Outcome of a pipeline run.

    Attributes:
        success: True only if every stage succeeded
        stages: Results of the stages that actually ran, in order
    """
    success: bool
    stages: List[StageResult] = field(default_factory=list)

    @property
    def failed_stage(self) -> Optional[StageResult]:
        for stage in self.stages:
            if not stage.success:
                return stage
        return None

    @property
    def error(self) -> Optional[BaseException]:
        failed = self.failed_stage
        return failed.error if failed else None


class Pipeline:
    """Runs named stages in order and stops at the first failure."""

    def __init__(self, name: str, logger: Logger):
        self.name = name
        self.log = logger
        self._stages: List[Tuple[str, Callable[[], Optional[str]]]] = []

    def add(self, name: str, action: Callable[[], Optional[str]]) -> 'Pipeline':
        """Append a stage. The action may return a message for the result."""
        self._stages.append((name, action))
        return self

    @property
    def stage_names(self) -> List[str]:
        return [name for name, _ in self._stages]

    def run(self) -> PipelineResult:
        results = []
        for index, (name, action) in enumerate(self._stages, start=1):
            self.log.debug(f"[{self.name} {index}/{len(self._stages)}] {name}")
            try:
                message = action()
            except (SwapError, OSError) as e:
                self.log.error(f"{self.name}: {name} failed: {e}")
                results.append(StageResult(name=name, success=False, message=str(e), error=e))
                return PipelineResult(success=False, stages=results)
            results.append(StageResult(name=name, success=True, message=message or ""))
        return PipelineResult(success=True, stages=results)
