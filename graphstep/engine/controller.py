"""
Stepping controller: decides when a suspended traversal may continue.

The runner calls wait() after every emitted event. In auto mode wait()
sleeps for the pacing delay; in manual mode it blocks until advance() is
called, with no timeout. Mode and pacing are read fresh on every wait, so a
user can switch from manual to auto in the middle of a run. cancel() wakes
any waiter and makes the current and every later wait() raise
TraversalCancelled.

All methods are safe to call from another thread (typically a web request
handler or a UI thread while the run executes in a worker thread).
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum

from graphstep.config import DEFAULT_STEP_MODE, clamp_pacing
from graphstep.errors import TraversalCancelled

logger = logging.getLogger(__name__)


class StepMode(str, Enum):
    """How a suspended traversal is released."""

    AUTO = "auto"
    MANUAL = "manual"


class StepController:
    """
    Cooperative suspension point shared by a traversal and its observer.

    An advance signal is a latch, not a counter. The runner calls
    begin_step() as it emits each event, which drops any signal sent before
    that emission, so one press releases at most one step. A press that
    arrives after the emission but before the run reaches wait() is kept.
    """

    def __init__(
        self,
        mode: StepMode | str = DEFAULT_STEP_MODE,
        pacing_ms: float | None = None,
    ) -> None:
        """
        Args:
            mode: Initial StepMode (or its string value)
            pacing_ms: Default auto-mode delay, clamped to the allowed range
        """
        self._cond = threading.Condition()
        self._mode = StepMode(mode)
        self._pacing_ms = clamp_pacing(pacing_ms)
        self._advance = False
        self._cancelled = False
        self._waiting = False

    # =========================================================================
    # Observer Side
    # =========================================================================

    @property
    def mode(self) -> StepMode:
        return self._mode

    def set_mode(self, mode: StepMode | str) -> None:
        """Switch mode. Takes effect at the current or next suspension."""
        mode = StepMode(mode)
        with self._cond:
            if mode is StepMode.MANUAL and self._mode is not StepMode.MANUAL:
                # Drop presses made while free-running
                self._advance = False
            self._mode = mode
            self._cond.notify_all()
        logger.debug(f"Step mode set to {mode.value}")

    def is_auto(self) -> bool:
        return self._mode is StepMode.AUTO

    @property
    def pacing_ms(self) -> int:
        return self._pacing_ms

    def set_pacing(self, pacing_ms: float) -> None:
        with self._cond:
            self._pacing_ms = clamp_pacing(pacing_ms)
            self._cond.notify_all()

    def advance(self) -> None:
        """Release the current manual suspension, or the next one reached."""
        with self._cond:
            self._advance = True
            self._cond.notify_all()

    def cancel(self) -> None:
        """Cancel the run at its current or next suspension point."""
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()
        logger.info("Traversal cancellation requested")

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def waiting(self) -> bool:
        """Whether a run is currently blocked waiting for advance()."""
        return self._waiting

    def reset(self) -> None:
        """Clear pending advances and cancellation before a new run."""
        with self._cond:
            self._advance = False
            self._cancelled = False

    # =========================================================================
    # Traversal Side
    # =========================================================================

    def begin_step(self) -> None:
        """Mark an event emission: advance signals sent before it are dropped."""
        with self._cond:
            self._advance = False

    def wait(self, delay_ms: float | None = None) -> None:
        """
        Suspend the calling traversal until it may continue.

        Args:
            delay_ms: Auto-mode delay for this suspension (defaults to the
                controller's pacing)

        Raises:
            TraversalCancelled: If the run was cancelled before or during
                the wait
        """
        with self._cond:
            self._raise_if_cancelled()

            if self._mode is StepMode.AUTO:
                delay = self._pacing_ms if delay_ms is None else max(0.0, delay_ms)
                deadline = time.monotonic() + delay / 1000
                while not self._cancelled and self._mode is StepMode.AUTO:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        break
                    self._cond.wait(remaining)
                self._raise_if_cancelled()
                if self._mode is StepMode.AUTO:
                    return
                # Switched to manual during the delay: wait for an advance

            self._waiting = True
            try:
                while (
                    not self._advance
                    and not self._cancelled
                    and self._mode is StepMode.MANUAL
                ):
                    self._cond.wait()
                self._raise_if_cancelled()
                if self._mode is StepMode.MANUAL:
                    self._advance = False
            finally:
                self._waiting = False

    def _raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise TraversalCancelled("Traversal cancelled")

    def __repr__(self) -> str:
        return (
            f"StepController(mode={self._mode.value!r}, pacing_ms={self._pacing_ms}, "
            f"advance={self._advance}, cancelled={self._cancelled})"
        )
