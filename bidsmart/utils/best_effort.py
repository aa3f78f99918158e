"""Best-effort side effects.

Some work (score recalculation, completion emails) must never change the
outcome reported to a caller. ``run_best_effort`` awaits such work and turns
any failure into a logged ``BestEffortResult`` instead of an exception.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from bidsmart.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class BestEffortResult:
    """Outcome of a best-effort task. Never raised, only inspected."""

    name: str
    succeeded: bool
    value: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return not self.succeeded


async def run_best_effort(name: str, awaitable: Awaitable[Any]) -> BestEffortResult:
    """Await ``awaitable`` and capture its outcome.

    Args:
        name: Short label used in logs
        awaitable: The side effect to run

    Returns:
        BestEffortResult describing success or the logged failure
    """
    try:
        value = await awaitable
    except Exception as e:
        LOGGER.error(
            f"Best-effort task '{name}' failed: {str(e)}",
            exc_info=True,
            extra={"task": name},
        )
        return BestEffortResult(name=name, succeeded=False, error=str(e))

    LOGGER.debug(f"Best-effort task '{name}' completed")
    return BestEffortResult(name=name, succeeded=True, value=value)
