"""logic/effects.py — Pointer-driven sparks layered over the backdrop

Usage:
    effects = AmbientEffects(document, viewport, bus)
    if effects.enabled:            # desktop-width viewports only
        ...
    # In scene update:
    effects.update(dt)

Three effects:
    trail     — occasional 4 px dot left behind the pointer (1 s)
    burst     — 8 glyphs flung radially from a click (0.6 s)
    parallax  — scroll offset applied to backdrop glyphs at draw time
"""

from __future__ import annotations
import math
import random

from components.particles import DEFAULT_COLORS, Viewport
from core.events import Clicked, EventBus, PointerMoved, Scrolled
from core.tuning import get as _tun
from core.visuals import Document, Visual

BURST_SYMBOLS = ("*", "+", "•")
DESKTOP_MIN_WIDTH = 768


class Spark:
    __slots__ = ("ox", "oy", "dx", "dy", "life", "max_life", "visual")

    def __init__(self, ox: float, oy: float, dx: float, dy: float,
                 life: float, visual: Visual):
        self.ox = ox
        self.oy = oy
        self.dx = dx
        self.dy = dy
        self.life = life
        self.max_life = life
        self.visual = visual


class AmbientEffects:
    """Owns every live spark.  Sparks detach their visual when they expire."""

    def __init__(self, document: Document, viewport: Viewport,
                 bus: EventBus | None = None,
                 rng: random.Random | None = None,
                 colors: tuple[str, ...] = DEFAULT_COLORS,
                 max_sparks: int | None = None):
        if max_sparks is None:
            max_sparks = int(_tun("effects", "max_sparks", 256))
        self.document = document
        self.viewport = viewport
        self.bus = bus
        self.rng = rng or random.Random()
        self.colors = colors
        self.scroll_offset = 0.0
        self._sparks: list[Spark] = []
        self._max = max_sparks
        self._trail_cooldown = 0.0
        self._trail_chance = float(_tun("effects", "trail_chance", 0.02))
        self._subscribed = False
        self.enabled = viewport.width > DESKTOP_MIN_WIDTH
        if self.enabled and bus is not None:
            bus.subscribe("PointerMoved", self.on_pointer)
            bus.subscribe("Clicked", self.on_click)
            bus.subscribe("Scrolled", self.on_scroll)
            self._subscribed = True

    @property
    def count(self) -> int:
        return len(self._sparks)

    @property
    def sparks(self) -> list[Spark]:
        return self._sparks

    # ── emitters ─────────────────────────────────────────────────────

    def emit(self, spark: Spark) -> bool:
        """Add a single spark (low-level).  Drops it when at capacity."""
        if len(self._sparks) >= self._max:
            spark.visual.detach()
            return False
        self._sparks.append(spark)
        return True

    def emit_trail(self, x: float, y: float) -> Spark | None:
        dot = Visual(class_name="trail", color=self.rng.choice(self.colors),
                     x=x, y=y, z_index=9999, radius=2.0)
        self.document.body.append(dot)
        spark = Spark(x, y, 0.0, 0.0, 1.0, dot)
        return spark if self.emit(spark) else None

    def emit_burst(self, x: float, y: float, count: int = 8) -> int:
        """Fling *count* glyphs outward at evenly spaced angles.

        Travel distance is 50–100 px per glyph; font size 10–20 px.
        Returns the number actually emitted.
        """
        emitted = 0
        for i in range(count):
            angle = 2 * math.pi * i / count
            velocity = 50 + self.rng.random() * 50
            glyph = Visual(
                class_name="burst",
                text=self.rng.choice(BURST_SYMBOLS),
                font_size=10 + self.rng.random() * 10,
                color=self.rng.choice(self.colors),
                x=x, y=y, z_index=9999,
            )
            self.document.body.append(glyph)
            spark = Spark(x, y, math.cos(angle) * velocity,
                          math.sin(angle) * velocity, 0.6, glyph)
            if self.emit(spark):
                emitted += 1
        return emitted

    # ── page signals ─────────────────────────────────────────────────

    def on_pointer(self, event: PointerMoved):
        if self._trail_cooldown > 0:
            return
        if self.rng.random() < self._trail_chance:
            self.emit_trail(event.x, event.y)
            self._trail_cooldown = 0.1

    def on_click(self, event: Clicked):
        # Buttons and links keep their own feedback
        if event.interactive:
            return
        self.emit_burst(event.x, event.y)

    def on_scroll(self, event: Scrolled):
        self.scroll_offset = event.offset

    def parallax_offset(self, index: int) -> float:
        """Vertical shift for the *index*-th backdrop glyph."""
        if not self.enabled:
            return 0.0
        return self.scroll_offset * (0.5 + (index % 3) * 0.2)

    # ── tick ─────────────────────────────────────────────────────────

    def update(self, dt: float):
        self._trail_cooldown = max(0.0, self._trail_cooldown - dt)
        alive: list[Spark] = []
        for s in self._sparks:
            s.life -= dt
            if s.life <= 0:
                s.visual.detach()
                continue
            t = 1.0 - s.life / s.max_life
            eased = 1.0 - (1.0 - t) ** 2
            v = s.visual
            v.x = s.ox + s.dx * eased
            v.y = s.oy + s.dy * eased
            v.scale = 1.0 - t
            v.opacity = 1.0 - t
            alive.append(s)
        self._sparks = alive

    def clear(self):
        """Remove all sparks immediately."""
        for s in self._sparks:
            s.visual.detach()
        self._sparks.clear()

    def destroy(self):
        self.clear()
        if self._subscribed and self.bus is not None:
            self.bus.unsubscribe("PointerMoved", self.on_pointer)
            self.bus.unsubscribe("Clicked", self.on_click)
            self.bus.unsubscribe("Scrolled", self.on_scroll)
            self._subscribed = False
