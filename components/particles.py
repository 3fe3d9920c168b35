"""components.particles — Backdrop particle configuration and state tags."""

from __future__ import annotations
import math
from dataclasses import dataclass, field, fields
from enum import Enum


DEFAULT_SYMBOLS = (
    "<>", "{}", "[]", "/>", "</>", "()", "/*", "*/", "==", "++", "--", "=>",
)
DEFAULT_COLORS = ("#6366f1", "#8b5cf6", "#ec4899", "#60a5fa", "#34d399")


class FadeState(Enum):
    ENTERING = "entering"
    VISIBLE = "visible"
    EXITING = "exiting"


class SystemState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    PAUSED = "paused"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class ParticleConfig:
    """Immutable tunables for one particle system.

    Times are seconds, distances are viewport pixels.  Derived configs
    (e.g. from the performance governor) are built with
    ``dataclasses.replace`` — nothing mutates a shared instance.
    """
    particle_count: int = 20
    symbols: tuple[str, ...] = DEFAULT_SYMBOLS
    colors: tuple[str, ...] = DEFAULT_COLORS
    min_size: float = 10.0
    max_size: float = 30.0
    min_speed: float = 10.0
    max_speed: float = 30.0
    fade_in_time: float = 2.0
    fade_out_time: float = 2.0
    fade_in_delay: float = 0.1
    visible_opacity: float = 0.3
    tick_interval: float = 0.05          # 20 Hz
    speed_divisor: float = 10.0
    spawn_offset: float = 50.0           # start this far below the bottom edge
    exit_margin: float = 50.0            # fade out this far above the top edge
    drift_change_chance: float = 0.02
    stagger_delay: float = 0.5
    generation_interval: float = 2.0
    eviction_delay: float = 30.0
    resize_debounce: float = 0.25
    resize_inset: float = 50.0
    low_cpu_threshold: int = 4
    low_memory_threshold: float = 4.0    # GB

    def __post_init__(self):
        if self.particle_count < 0:
            raise ValueError(f"particle_count must be >= 0, got {self.particle_count}")
        if not self.symbols or not self.colors:
            raise ValueError("symbols and colors must be non-empty")
        if self.min_size > self.max_size:
            raise ValueError(f"min_size {self.min_size} > max_size {self.max_size}")
        if self.min_speed > self.max_speed:
            raise ValueError(f"min_speed {self.min_speed} > max_speed {self.max_speed}")
        for name in ("tick_interval", "speed_divisor", "stagger_delay",
                     "generation_interval", "eviction_delay", "resize_debounce"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number, got {value}")

    @classmethod
    def from_tuning(cls, section_name: str = "particles") -> ParticleConfig:
        """Build a config from a ``data/tuning.toml`` section.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        from core.tuning import section
        raw = section(section_name)
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in raw.items():
            if key not in known:
                continue
            if isinstance(value, list):
                value = tuple(value)
            kwargs[key] = value
        return cls(**kwargs)


@dataclass
class Viewport:
    """Current drawable area in pixels.  Shared by reference, updated on resize."""
    width: float = 960.0
    height: float = 640.0


@dataclass
class HostSignals:
    """What the host told us at startup.  ``None`` means "not reported"."""
    reduced_motion: bool = False
    hardware_concurrency: int | None = None
    device_memory: float | None = None
    viewport: Viewport = field(default_factory=Viewport)
