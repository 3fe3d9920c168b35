"""components — Plain data shared by the backdrop systems.

Submodules
----------
particles      ParticleConfig, FadeState, SystemState, Viewport, HostSignals

All public names are re-exported here so callers can write
``from components import ParticleConfig``.
"""

from components.particles import (
    DEFAULT_COLORS, DEFAULT_SYMBOLS,
    FadeState, SystemState, ParticleConfig, Viewport, HostSignals,
)

__all__ = [
    "DEFAULT_COLORS", "DEFAULT_SYMBOLS",
    "FadeState", "SystemState", "ParticleConfig", "Viewport", "HostSignals",
]
