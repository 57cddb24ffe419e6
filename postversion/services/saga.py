"""Step list with per-step compensation for multi-write operations.

Each step runs inside a savepoint. When a step fails, the steps that already
completed are compensated in reverse order and the original error is
re-raised. A compensation that fails is logged and skipped: the remaining
compensations still run.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PostVersionError, SubstrateError

logger = logging.getLogger(__name__)


@dataclass
class SagaStep:
    name: str
    action: Callable[[Dict[str, Any]], Any]
    compensate: Optional[Callable[[Any], None]] = None


class Saga:
    """Runs steps in order and undoes completed ones on failure.

    ``action`` receives the results of the previous steps keyed by step name;
    ``compensate`` receives the result of its own step.
    """

    def __init__(self, db: Session, name: str, **context: Any):
        self.db = db
        self.name = name
        self.context = context
        self.steps: List[SagaStep] = []
        self.results: Dict[str, Any] = {}
        self.failed_compensations: List[str] = []

    def step(
        self,
        name: str,
        action: Callable[[Dict[str, Any]], Any],
        compensate: Optional[Callable[[Any], None]] = None,
    ) -> "Saga":
        self.steps.append(SagaStep(name=name, action=action, compensate=compensate))
        return self

    def run(self) -> Dict[str, Any]:
        completed: List[SagaStep] = []
        for step in self.steps:
            try:
                with self.db.begin_nested():
                    self.results[step.name] = step.action(self.results)
            except (PostVersionError, SQLAlchemyError) as e:
                logger.warning(
                    "%s: step '%s' failed, compensating %d step(s)",
                    self.name, step.name, len(completed),
                    extra={"saga": self.name, "step": step.name, **self.context},
                )
                self._compensate(completed)
                if isinstance(e, SQLAlchemyError):
                    raise SubstrateError(f"Step '{step.name}' of {self.name} failed", original_error=e) from e
                raise
            completed.append(step)
        return self.results

    def _compensate(self, completed: List[SagaStep]) -> None:
        for step in reversed(completed):
            if step.compensate is None:
                continue
            try:
                with self.db.begin_nested():
                    step.compensate(self.results.get(step.name))
            except (PostVersionError, SQLAlchemyError) as e:
                self.failed_compensations.append(step.name)
                logger.error(
                    "%s: compensation of step '%s' failed, data left inconsistent: %s",
                    self.name, step.name, e,
                    extra={"saga": self.name, "step": step.name, "anomaly": "compensation_failed", **self.context},
                )
