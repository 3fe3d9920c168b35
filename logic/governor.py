"""logic/governor.py — Startup particle count for weak hardware.

Evaluated once, before the first ParticleSystem is built.  It never
re-runs; a slow frame later on does not shrink anything.
"""

from __future__ import annotations
from dataclasses import replace

from components.particles import HostSignals, ParticleConfig


def apply_performance_governor(config: ParticleConfig,
                               signals: HostSignals) -> ParticleConfig:
    """Return *config* with ``particle_count`` halved per weak signal.

    Few logical CPUs halves the count; little device memory halves it
    again.  Unreported signals (``None``) are ignored.
    """
    count = config.particle_count
    cpus = signals.hardware_concurrency
    memory = signals.device_memory

    if cpus and cpus < config.low_cpu_threshold:
        count //= 2
    if memory and memory < config.low_memory_threshold:
        count //= 2

    if count == config.particle_count:
        return config
    print(f"[GOVERNOR] particle_count {config.particle_count} → {count} "
          f"(cpus={cpus}, memory={memory}GB)")
    return replace(config, particle_count=count)
