"""core/scheduler.py — Timer scheduler for the backdrop.

Every delayed or repeating action (staggered spawns, the generation
interval, the eviction safety net, resize debouncing) is a timer in one
priority queue ordered by clock time.  Nothing sleeps; the owner
advances the clock and calls ``tick``.

    scheduler = TimerScheduler()
    scheduler.register_handler("GENERATE", on_generate)
    scheduler.post(time=2.0, owner=0, timer_type="GENERATE", interval=2.0)
    ...
    scheduler.tick(now=4.5)        # fires at 2.0 and 4.0

Timers are grouped by *owner* (an int — a particle id, or 0 for the
system itself) so that everything an owner scheduled can be cancelled in
one call when it goes away.
"""

from __future__ import annotations
import heapq
from dataclasses import dataclass, field
from typing import Any, Callable


SYSTEM_OWNER = 0

# Timers landing on a tick boundary fire on that tick despite float error
_EPS = 1e-9


@dataclass(order=True)
class ScheduledTimer:
    """A single pending timer.

    Ordered by ``time`` so the heap gives us earliest-first.
    """
    time: float
    # heapq tiebreaker (insertion order) — avoids comparing timer_type
    _seq: int = field(compare=True, repr=False)
    owner: int = field(compare=False, default=SYSTEM_OWNER)
    timer_type: str = field(compare=False, default="")
    data: dict[str, Any] = field(compare=False, default_factory=dict)
    interval: float | None = field(compare=False, default=None)
    cancelled: bool = field(compare=False, default=False)


class TimerScheduler:
    """Priority-queue timer scheduler shared by a particle system."""

    def __init__(self) -> None:
        self._queue: list[ScheduledTimer] = []
        self._seq: int = 0
        # Dispatcher: timer_type → handler function
        self._handlers: dict[str, Callable] = {}
        # Per-owner timer tracking for cancellation
        self._owner_timers: dict[int, list[ScheduledTimer]] = {}

    # ── Posting timers ───────────────────────────────────────────────

    def post(self, time: float, owner: int, timer_type: str,
             data: dict[str, Any] | None = None,
             interval: float | None = None) -> ScheduledTimer:
        """Schedule a timer at absolute clock ``time``.

        With ``interval`` set the timer repeats every ``interval``
        seconds until cancelled.
        """
        if interval is not None and interval <= 0:
            raise ValueError(f"timer interval must be positive, got {interval}")
        self._seq += 1
        timer = ScheduledTimer(
            time=time,
            _seq=self._seq,
            owner=owner,
            timer_type=timer_type,
            data=data or {},
            interval=interval,
        )
        heapq.heappush(self._queue, timer)
        self._owner_timers.setdefault(owner, []).append(timer)
        return timer

    def post_delta(self, now: float, delta: float, owner: int,
                   timer_type: str, data: dict[str, Any] | None = None,
                   interval: float | None = None) -> ScheduledTimer:
        """Post a timer ``delta`` seconds after ``now``."""
        return self.post(now + delta, owner, timer_type, data, interval)

    # ── Cancellation ─────────────────────────────────────────────────

    def cancel_owner(self, owner: int) -> int:
        """Cancel all pending timers for an owner. Returns count cancelled."""
        timers = self._owner_timers.pop(owner, [])
        count = 0
        for t in timers:
            if not t.cancelled:
                t.cancelled = True
                count += 1
        return count

    def cancel_type(self, owner: int, timer_type: str) -> int:
        """Cancel timers of a specific type for an owner."""
        timers = self._owner_timers.get(owner, [])
        count = 0
        for t in timers:
            if not t.cancelled and t.timer_type == timer_type:
                t.cancelled = True
                count += 1
        if owner in self._owner_timers:
            self._owner_timers[owner] = [t for t in timers if not t.cancelled]
        return count

    def cancel_all(self) -> int:
        """Cancel every pending timer and forget all owners."""
        count = 0
        for t in self._queue:
            if not t.cancelled:
                t.cancelled = True
                count += 1
        self._queue.clear()
        self._owner_timers.clear()
        return count

    # ── Handler registration ─────────────────────────────────────────

    def register_handler(self, timer_type: str, handler: Callable) -> None:
        """Register a handler for a timer type.

        Handler signature: ``handler(owner, timer_type, data, scheduler, now)``
        """
        self._handlers[timer_type] = handler

    # ── Tick ─────────────────────────────────────────────────────────

    def peek_time(self) -> float:
        """Return the time of the next timer, or inf if empty."""
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        if self._queue:
            return self._queue[0].time
        return float("inf")

    def tick(self, now: float) -> int:
        """Fire every timer due at or before ``now``.

        Handlers may post or cancel timers; newly posted timers that are
        already due fire in the same call.  Returns the number fired.
        """
        count = 0

        while self._queue:
            if self._queue[0].cancelled:
                heapq.heappop(self._queue)
                continue
            if self._queue[0].time > now + _EPS:
                break

            timer = heapq.heappop(self._queue)

            handler = self._handlers.get(timer.timer_type)
            if handler:
                handler(timer.owner, timer.timer_type, timer.data, self, now)
                count += 1

            if timer.interval is not None and not timer.cancelled:
                # Re-arm in place; owner tracking still holds this object
                self._seq += 1
                timer.time += timer.interval
                timer._seq = self._seq
                heapq.heappush(self._queue, timer)
                continue

            owner_timers = self._owner_timers.get(timer.owner)
            if owner_timers:
                try:
                    owner_timers.remove(timer)
                except ValueError:
                    pass
                if not owner_timers:
                    del self._owner_timers[timer.owner]

        return count

    # ── Queries ──────────────────────────────────────────────────────

    def pending_count(self) -> int:
        """Number of non-cancelled timers in the queue."""
        return sum(1 for t in self._queue if not t.cancelled)

    def has_pending(self, owner: int, timer_type: str | None = None) -> bool:
        """Check if an owner has any pending timers (optionally filtered)."""
        for t in self._owner_timers.get(owner, []):
            if t.cancelled:
                continue
            if timer_type is None or t.timer_type == timer_type:
                return True
        return False

    def __repr__(self) -> str:
        return f"TimerScheduler(pending={self.pending_count()})"
