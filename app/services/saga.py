"""
Saga: locally committed steps with compensation on failure.

    with Saga("checkout", on_abort=db.rollback) as saga:
        reserved = saga.step("reserve_stock", reserve, compensate=release)
        charge = saga.step("charge", lambda: gateway.charge(...), compensate=refund)

If anything inside the block raises, ``on_abort`` runs first, then every
recorded compensator in reverse order with the value its step returned. A
compensator that fails is logged and skipped; the original exception always
propagates.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Saga:
    def __init__(self, name: str, on_abort: Optional[Callable[[], None]] = None):
        self.name = name
        self.on_abort = on_abort
        self._compensators: List[Tuple[str, Any, Callable[[Any], None]]] = []

    def step(self, name: str, action: Callable[[], Any], compensate: Optional[Callable[[Any], None]] = None) -> Any:
        """Run a step, recording its compensator only once it succeeded."""
        value = action()
        if compensate is not None:
            self._compensators.append((name, value, compensate))
        logger.debug("saga %s: step %s done", self.name, name)
        return value

    def compensate(self) -> Tuple[int, int]:
        """Run compensators in reverse. Returns (run, failed)."""
        comp_run = 0
        comp_failed = 0

        if self.on_abort is not None:
            try:
                self.on_abort()
            except Exception:
                logger.exception("saga %s: abort hook failed", self.name)

        for name, value, comp in reversed(self._compensators):
            try:
                comp(value)
                comp_run += 1
                logger.info("saga %s: compensated %s", self.name, name)
            except Exception:
                comp_failed += 1
                logger.exception("saga %s: compensation %s failed", self.name, name)

        self._compensators.clear()
        return comp_run, comp_failed

    def __enter__(self) -> "Saga":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            logger.warning("saga %s aborted: %s", self.name, exc)
            self.compensate()
        return False
