"""logic/particle_system.py — Owner of the backdrop particle pool.

    system = ParticleSystem(document, config, viewport, bus)
    system.init()
    ...
    system.update(dt)      # once per frame
    ...
    system.destroy()

Lifecycle: UNINITIALIZED → ACTIVE ⇄ PAUSED → DESTROYED.

Time is a fixed-step clock: ``update(dt)`` accumulates frame time and
runs one tick per ``config.tick_interval``.  Each tick fires due timers
(spawns, evictions, resize settling), moves every live particle, then
reaps the ones that disposed themselves.  Paused systems keep ticking;
only generation of new particles stops.
"""

from __future__ import annotations
import random

from components.particles import ParticleConfig, SystemState, Viewport
from core.events import EventBus, ViewportResized, VisibilityChanged
from core.scheduler import SYSTEM_OWNER, TimerScheduler
from core.visuals import Document, Visual
from logic.particles import (
    Particle, ParticlePool, clamp_to_width, dispose_particle,
    spawn_particle, update_particle,
)

CONTAINER_ID = "particle-container"

# A frame longer than this many ticks drops the backlog instead of
# fast-forwarding (window dragged, debugger paused, ...).
MAX_TICKS_PER_UPDATE = 20
_EPS = 1e-9

_GENERATION_TIMERS = ("STAGGER_SPAWN", "GENERATE")


class ParticleSystem:
    """Bounded pool of rising glyphs plus their generation schedule."""

    def __init__(
        self,
        document: Document,
        config: ParticleConfig,
        viewport: Viewport,
        bus: EventBus | None = None,
        rng: random.Random | None = None,
    ):
        self.document = document
        self.config = config
        self.viewport = viewport
        self.bus = bus
        self.rng = rng or random.Random()

        self.pool = ParticlePool()
        self.scheduler = TimerScheduler()
        self.container: Visual | None = None
        self.active = False
        self.state = SystemState.UNINITIALIZED
        self.now = 0.0
        self._ticks = 0
        self._accum = 0.0
        self._pending_size: tuple[float, float] | None = None

        self.scheduler.register_handler("STAGGER_SPAWN", self._on_spawn_timer)
        self.scheduler.register_handler("GENERATE", self._on_spawn_timer)
        self.scheduler.register_handler("EVICT", self._on_evict)
        self.scheduler.register_handler("RESIZE_SETTLE", self._on_resize_settle)

    # ── lifecycle ────────────────────────────────────────────────────

    def init(self) -> bool:
        if self.state is not SystemState.UNINITIALIZED:
            return False
        self.container = Visual(node_id=CONTAINER_ID, z_index=-1)
        self.document.body.append(self.container)
        self.state = SystemState.ACTIVE
        self.active = True
        self._start_generation()
        if self.bus is not None:
            self.bus.subscribe("VisibilityChanged", self.on_visibility)
            self.bus.subscribe("ViewportResized", self.on_resize)
        return True

    def pause(self) -> bool:
        """Stop creating particles.  Live ones keep animating."""
        if self.state is not SystemState.ACTIVE:
            return False
        self.active = False
        self.state = SystemState.PAUSED
        for timer_type in _GENERATION_TIMERS:
            self.scheduler.cancel_type(SYSTEM_OWNER, timer_type)
        return True

    def resume(self) -> bool:
        if self.state is not SystemState.PAUSED:
            return False
        self.active = True
        self.state = SystemState.ACTIVE
        self._start_generation()
        return True

    def destroy(self) -> bool:
        """Dispose every particle, drop the container, cancel all timers."""
        if self.state is SystemState.DESTROYED:
            return False
        self.active = False
        for p in self.pool.clear():
            dispose_particle(p)
        self.scheduler.cancel_all()
        if self.container is not None:
            self.container.detach()
            self.container = None
        if self.bus is not None:
            self.bus.unsubscribe("VisibilityChanged", self.on_visibility)
            self.bus.unsubscribe("ViewportResized", self.on_resize)
        self.state = SystemState.DESTROYED
        return True

    # ── page signals ─────────────────────────────────────────────────

    def on_visibility(self, event: VisibilityChanged):
        if event.hidden:
            self.pause()
        else:
            self.resume()

    def on_resize(self, event: ViewportResized):
        """Debounced: only the last size within the window is applied."""
        if self.state is SystemState.DESTROYED:
            return
        self._pending_size = (event.width, event.height)
        self.scheduler.cancel_type(SYSTEM_OWNER, "RESIZE_SETTLE")
        self.scheduler.post_delta(self.now, self.config.resize_debounce,
                                  SYSTEM_OWNER, "RESIZE_SETTLE")

    # ── frame driver ─────────────────────────────────────────────────

    def update(self, dt: float) -> int:
        """Advance by *dt* seconds of wall time.  Returns ticks run."""
        if self.state in (SystemState.UNINITIALIZED, SystemState.DESTROYED):
            return 0
        step = self.config.tick_interval
        self._accum += max(0.0, dt)
        ticks = 0
        while self._accum + _EPS >= step:
            if ticks >= MAX_TICKS_PER_UPDATE:
                self._accum = 0.0
                break
            self._accum -= step
            self._ticks += 1
            self.now = self._ticks * step
            self._tick()
            ticks += 1
            if self.state is SystemState.DESTROYED:
                break
        return ticks

    def _tick(self):
        self.scheduler.tick(self.now)
        for p in self.pool:
            update_particle(p, self.config, self.viewport, self.rng)
        for pid in self.pool.reap():
            self.scheduler.cancel_owner(pid)

    # ── generation ───────────────────────────────────────────────────

    def _start_generation(self):
        cfg = self.config
        for timer_type in _GENERATION_TIMERS:
            self.scheduler.cancel_type(SYSTEM_OWNER, timer_type)
        # Staggered so the first screen doesn't pop in all at once
        for i in range(cfg.particle_count):
            self.scheduler.post_delta(self.now, i * cfg.stagger_delay,
                                      SYSTEM_OWNER, "STAGGER_SPAWN")
        self.scheduler.post_delta(self.now, cfg.generation_interval,
                                  SYSTEM_OWNER, "GENERATE",
                                  interval=cfg.generation_interval)

    def _on_spawn_timer(self, owner, timer_type, data, scheduler, now):
        self.create_particle()

    def create_particle(self) -> Particle | None:
        """Spawn one particle if generation is allowed and there is room."""
        if not self.active or self.container is None:
            return None
        if len(self.pool) >= self.config.particle_count:
            return None
        p = spawn_particle(self.container, self.config, self.viewport,
                           self.pool.next_id(), self.rng)
        if p is None:
            return None
        self.pool.add(p)
        # Safety net only; normal disposal happens after the fade-out
        self.scheduler.post_delta(self.now, self.config.eviction_delay,
                                  p.pid, "EVICT")
        return p

    def _on_evict(self, owner, timer_type, data, scheduler, now):
        p = self.pool.remove(owner)
        if p is not None:
            dispose_particle(p)

    def _on_resize_settle(self, owner, timer_type, data, scheduler, now):
        if self._pending_size is None:
            return
        width, height = self._pending_size
        self._pending_size = None
        self.viewport.width = width
        self.viewport.height = height
        for p in self.pool:
            clamp_to_width(p, width, self.config.resize_inset)

    # ── queries ──────────────────────────────────────────────────────

    @property
    def live_count(self) -> int:
        return len(self.pool)

    @property
    def particles(self) -> list[Particle]:
        """Snapshot of the pool, in creation order."""
        return list(self.pool)

    def __repr__(self) -> str:
        return (f"ParticleSystem({self.state.value}, live={len(self.pool)}"
                f"/{self.config.particle_count}, t={self.now:.2f})")
