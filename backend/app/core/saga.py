"""
Compensating-transaction runner (saga).

Steps run one at a time in declaration order. When a step raises, the steps
that already completed are compensated in strict reverse order, each with the
result it returned. This is best-effort: a compensation may itself fail, in
which case the failure is logged and the remaining compensations still run.
"""
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class SagaStep:
    name: str
    execute: Callable[[Any], Any]
    compensate: Callable[[Any, Any], Any] | None = None


@dataclass
class SagaResult:
    success: bool
    results: list[Any] = field(default_factory=list)
    error: str | None = None
    failed_step: str | None = None
    # True as soon as one compensation was invoked, whether or not it succeeded.
    compensated: bool = False


def _compensate(steps: list[SagaStep], results: list[Any], ctx: Any) -> bool:
    compensated = False
    for step, result in reversed(list(zip(steps, results))):
        if step.compensate is None:
            continue
        compensated = True
        try:
            step.compensate(ctx, result)
            logger.info("Saga: compensation de '%s' effectuée", step.name)
        except Exception:
            logger.exception("Saga: échec de la compensation de '%s'", step.name)
    return compensated


async def _acompensate(steps: list[SagaStep], results: list[Any], ctx: Any) -> bool:
    compensated = False
    for step, result in reversed(list(zip(steps, results))):
        if step.compensate is None:
            continue
        compensated = True
        try:
            outcome = step.compensate(ctx, result)
            if inspect.isawaitable(outcome):
                await outcome
            logger.info("Saga: compensation de '%s' effectuée", step.name)
        except Exception:
            logger.exception("Saga: échec de la compensation de '%s'", step.name)
    return compensated


def run_saga(steps: list[SagaStep], ctx: Any = None) -> SagaResult:
    """
    Execute `steps` against the shared context `ctx` (typically a DB session).
    Never raises on step failure: check `SagaResult.success`.
    """
    results: list[Any] = []
    for step in steps:
        try:
            results.append(step.execute(ctx))
        except Exception as e:
            logger.error("Saga: l'étape '%s' a échoué : %s", step.name, e)
            compensated = _compensate(steps, results, ctx)
            return SagaResult(
                success=False,
                results=results,
                error=str(e),
                failed_step=step.name,
                compensated=compensated,
            )
    return SagaResult(success=True, results=results)


async def run_saga_async(steps: list[SagaStep], ctx: Any = None) -> SagaResult:
    """Same contract as run_saga; awaitable step results are awaited one at a time."""
    results: list[Any] = []
    for step in steps:
        try:
            outcome = step.execute(ctx)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            results.append(outcome)
        except Exception as e:
            logger.error("Saga: l'étape '%s' a échoué : %s", step.name, e)
            compensated = await _acompensate(steps, results, ctx)
            return SagaResult(
                success=False,
                results=results,
                error=str(e),
                failed_step=step.name,
                compensated=compensated,
            )
    return SagaResult(success=True, results=results)
