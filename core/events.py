"""core/events.py — Page lifecycle event bus.

The window shell translates raw pygame events into the page-level
signals the backdrop cares about and queues them here::

    from core.events import EventBus, VisibilityChanged
    bus = EventBus()
    bus.emit(VisibilityChanged(hidden=True))

Consumers subscribe with a callable::

    bus.subscribe("VisibilityChanged", system.on_visibility)

And the scene drains once per frame::

    bus.drain()          # calls all handlers for pending events

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; those are processed in the same drain.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
from collections import defaultdict
import traceback


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class VisibilityChanged:
    """The window was hidden (minimised, covered) or shown again."""
    hidden: bool = False


@dataclass
class ViewportResized:
    """The drawable area changed size (pixels)."""
    width: float = 0.0
    height: float = 0.0


@dataclass
class PageUnload:
    """The window is closing; everything must be torn down."""


@dataclass
class PointerMoved:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Clicked:
    """Primary-button click.  ``interactive`` mirrors a click on a button/link."""
    x: float = 0.0
    y: float = 0.0
    interactive: bool = False


@dataclass
class Scrolled:
    """Accumulated scroll offset in pixels (positive = scrolled down)."""
    offset: float = 0.0


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

class EventBus:
    """Fire-and-forget event bus owned by the backdrop scene."""

    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    # ── Public API ───────────────────────────────────────────────────

    def emit(self, event) -> None:
        """Queue an event for processing on next ``drain()``."""
        self._queue.append(event)

    def subscribe(self, event_type: str, handler: Callable) -> None:
        """Register *handler* to receive events of *event_type*.

        *event_type* is the class name, e.g. ``"ViewportResized"``.
        """
        self._subs[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: Callable) -> bool:
        """Remove *handler*.  Returns False if it was not subscribed."""
        handlers = self._subs.get(event_type)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subs.get(event_type, []))

    def drain(self) -> int:
        """Process all queued events.  Returns number processed.

        Handlers may emit new events — those are processed in the
        same drain pass (breadth-first).
        """
        processed = 0
        safety = 1000  # prevent infinite loops
        while self._queue and safety > 0:
            batch = self._queue[:]
            self._queue.clear()
            for event in batch:
                name = type(event).__name__
                self._stats[name] += 1
                # Copy: handlers may unsubscribe themselves (destroy on unload)
                for handler in list(self._subs.get(name, [])):
                    try:
                        handler(event)
                    except Exception as exc:
                        print(f"[EVENT] handler error for {name}: {exc}")
                        traceback.print_exc()
            processed += len(batch)
            safety -= 1
        return processed

    def clear(self) -> None:
        """Discard all pending events."""
        self._queue.clear()

    def stats(self) -> dict[str, int]:
        """Return cumulative event counts by type."""
        return dict(self._stats)

    def pending_count(self) -> int:
        """Number of events waiting to be drained."""
        return len(self._queue)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._queue)}, subs={len(self._subs)})"
