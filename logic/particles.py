"""logic/particles.py — Backdrop glyph particles

Usage:
    pool = ParticlePool()
    p = spawn_particle(container, config, viewport, pool.next_id(), rng)
    if p is not None:
        pool.add(p)

    # Every fixed tick (config.tick_interval):
    for p in pool:
        update_particle(p, config, viewport, rng)
    pool.reap()

A particle rises from below the bottom edge, fades in after a short
delay, wanders sideways, and once it is above the top edge fades out and
disposes itself.  Particles never touch the pool; the owner reaps the
disposed ones.

Numeric fields are only ever overwritten with finite values.  A bad
viewport measurement or a degenerate config produces a tick that does
nothing instead of a NaN that poisons every later frame.
"""

from __future__ import annotations
import math
import random
from typing import Iterator

from components.particles import FadeState, ParticleConfig, Viewport
from core.visuals import Visual

_MIN_RISE_SPEED = 1.0     # px per divisor unit; keeps zero/negative speeds moving up
_MIN_DIVISOR = 1e-9       # last-resort floor; configs already reject divisor <= 0


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


class Particle:
    __slots__ = (
        "pid", "x", "y", "size", "speed", "symbol", "color",
        "rotation", "rotation_speed", "drift",
        "opacity", "opacity_target", "fade_rate",
        "fade_state", "age", "fade_elapsed", "disposed", "visual",
    )

    def __init__(
        self,
        pid: int,
        x: float, y: float,
        size: float, speed: float,
        symbol: str, color: str,
        rotation: float, rotation_speed: float,
        drift: float,
        visual: Visual | None = None,
    ):
        self.pid = pid
        self.x = x
        self.y = y
        self.size = size
        self.speed = speed
        self.symbol = symbol
        self.color = color
        self.rotation = rotation
        self.rotation_speed = rotation_speed
        self.drift = drift
        self.opacity = 0.0
        self.opacity_target = 0.0
        self.fade_rate = 0.0
        self.fade_state = FadeState.ENTERING
        self.age = 0.0
        self.fade_elapsed = 0.0
        self.disposed = False
        self.visual = visual

    def transform(self) -> str:
        return f"translate({self.x:.2f}px, {self.y:.2f}px) rotate({self.rotation:.2f}deg)"

    def __repr__(self) -> str:
        return (f"Particle(pid={self.pid}, {self.symbol!r}, "
                f"x={self.x:.1f}, y={self.y:.1f}, {self.fade_state.value})")


# ── construction ─────────────────────────────────────────────────────

def spawn_particle(
    container: Visual,
    config: ParticleConfig,
    viewport: Viewport,
    pid: int,
    rng: random.Random | None = None,
) -> Particle | None:
    """Sample a new particle just below the viewport and attach its visual.

    Returns ``None`` (and attaches nothing) when any sampled value is not
    finite, e.g. because the viewport was measured mid-resize.
    """
    rng = rng or random
    x = rng.random() * viewport.width
    y = viewport.height + config.spawn_offset
    size = rng.uniform(config.min_size, config.max_size)
    speed = rng.uniform(config.min_speed, config.max_speed)
    rotation = rng.random() * 360.0
    rotation_speed = rng.random() * 2.0 - 1.0
    drift = rng.random() * 2.0 - 1.0

    if not _finite(x, y, size, speed, rotation, rotation_speed, drift):
        print(f"[PARTICLES] spawn aborted: non-finite sample "
              f"(viewport={viewport.width}x{viewport.height})")
        return None

    p = Particle(
        pid=pid, x=x, y=y, size=size, speed=speed,
        symbol=rng.choice(config.symbols),
        color=rng.choice(config.colors),
        rotation=rotation, rotation_speed=rotation_speed, drift=drift,
    )
    visual = Visual(
        class_name="particle",
        text=p.symbol,
        font_size=size,
        color=p.color,
        opacity=0.0,
        x=x, y=y,
        z_index=-1,
    )
    visual.rotation = rotation
    visual.transform = f"rotate({rotation:.2f}deg)"
    container.append(visual)
    p.visual = visual
    return p


# ── fade state machine ───────────────────────────────────────────────

def _ramp_to(p: Particle, target: float, duration: float):
    p.opacity_target = target
    if duration <= 0 or not math.isfinite(duration):
        p.opacity = target
        p.fade_rate = 0.0
    else:
        p.fade_rate = abs(target - p.opacity) / duration


def reveal(p: Particle, config: ParticleConfig) -> bool:
    """ENTERING → VISIBLE.  Returns False if the particle already moved on."""
    if p.disposed or p.fade_state is not FadeState.ENTERING:
        return False
    p.fade_state = FadeState.VISIBLE
    _ramp_to(p, config.visible_opacity, config.fade_in_time)
    return True


def begin_fade_out(p: Particle, config: ParticleConfig) -> bool:
    """Enter EXITING.  A no-op if already exiting or disposed."""
    if p.disposed or p.fade_state is FadeState.EXITING:
        return False
    p.fade_state = FadeState.EXITING
    p.fade_elapsed = 0.0
    _ramp_to(p, 0.0, config.fade_out_time)
    return True


def dispose_particle(p: Particle) -> bool:
    """Detach the visual and mark the particle dead.  Idempotent."""
    if p.disposed:
        return False
    p.disposed = True
    if p.visual is not None:
        p.visual.detach()
        p.visual = None
    return True


# ── per-tick update ──────────────────────────────────────────────────

def update_particle(
    p: Particle,
    config: ParticleConfig,
    viewport: Viewport,
    rng: random.Random | None = None,
):
    """Advance one fixed tick (``config.tick_interval`` seconds)."""
    if p.disposed:
        return
    rng = rng or random
    step = config.tick_interval

    p.age += step
    if p.fade_state is FadeState.ENTERING and p.age >= config.fade_in_delay:
        reveal(p, config)

    # Movement
    speed = p.speed if math.isfinite(p.speed) else 0.0
    speed = max(speed, _MIN_RISE_SPEED)
    divisor = config.speed_divisor
    if not math.isfinite(divisor) or divisor < _MIN_DIVISOR:
        divisor = _MIN_DIVISOR
    if not math.isfinite(p.drift):
        p.drift = 0.0
    if not math.isfinite(p.rotation_speed):
        p.rotation_speed = 0.0

    new_y = p.y - speed / divisor
    new_x = p.x + p.drift
    if _finite(new_x, new_y):
        p.x = new_x
        p.y = new_y
    new_rot = p.rotation + p.rotation_speed
    if math.isfinite(new_rot):
        p.rotation = new_rot % 360.0

    # Opacity ramp
    if p.opacity != p.opacity_target:
        delta = p.fade_rate * step
        if p.opacity < p.opacity_target:
            nxt = min(p.opacity + delta, p.opacity_target)
        else:
            nxt = max(p.opacity - delta, p.opacity_target)
        if math.isfinite(nxt):
            p.opacity = nxt

    _render(p)

    if p.fade_state is not FadeState.EXITING and p.y < -config.exit_margin:
        begin_fade_out(p, config)
    elif p.fade_state is FadeState.EXITING:
        p.fade_elapsed += step
        if p.fade_elapsed >= config.fade_out_time:
            dispose_particle(p)
            return

    # Organic wandering
    if rng.random() < config.drift_change_chance:
        p.drift = rng.random() * 2.0 - 1.0


def _render(p: Particle):
    v = p.visual
    if v is None:
        return
    v.x = p.x
    v.y = p.y
    v.rotation = p.rotation
    v.opacity = p.opacity
    v.transform = p.transform()


def clamp_to_width(p: Particle, width: float, inset: float) -> bool:
    """Pull a particle back on-screen after the viewport shrank."""
    if p.disposed or not math.isfinite(width) or p.x <= width:
        return False
    p.x = max(0.0, width - inset)
    _render(p)
    return True


# ── pool ─────────────────────────────────────────────────────────────

class ParticlePool:
    """Arena of live particles keyed by stable ids (insertion-ordered)."""

    def __init__(self):
        self._items: dict[int, Particle] = {}
        self._next_id = 1          # 0 is the system's own timer owner

    def next_id(self) -> int:
        pid = self._next_id
        self._next_id += 1
        return pid

    def add(self, p: Particle):
        if p.pid in self._items:
            raise ValueError(f"particle id {p.pid} already pooled")
        self._items[p.pid] = p

    def get(self, pid: int) -> Particle | None:
        return self._items.get(pid)

    def remove(self, pid: int) -> Particle | None:
        return self._items.pop(pid, None)

    def reap(self) -> list[int]:
        """Drop disposed particles.  Returns their ids."""
        dead = [pid for pid, p in self._items.items() if p.disposed]
        for pid in dead:
            del self._items[pid]
        return dead

    def clear(self) -> list[Particle]:
        items = list(self._items.values())
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Particle]:
        return iter(list(self._items.values()))

    def __contains__(self, pid: int) -> bool:
        return pid in self._items
