"""core/host.py — Startup readings of the machine we are running on.

Only read once, before the backdrop is built.  Every signal is optional:
a platform that can't report one leaves it ``None`` and the governor
ignores it.
"""

from __future__ import annotations
import os

from components.particles import HostSignals, Viewport

REDUCED_MOTION_ENV = "CODEQUEST_REDUCED_MOTION"
_GB = 1024 ** 3


def detect_device_memory() -> float | None:
    """Physical memory in GB, or ``None`` if the OS won't say."""
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    if pages <= 0 or page_size <= 0:
        return None
    return pages * page_size / _GB


def prefers_reduced_motion(environ=None) -> bool:
    value = (environ if environ is not None else os.environ).get(REDUCED_MOTION_ENV, "")
    return value.strip().lower() in ("1", "true", "yes", "on", "reduce")


def detect_host(width: float, height: float,
                reduced_motion: bool | None = None,
                cpus: int | None = None,
                memory_gb: float | None = None) -> HostSignals:
    """Collect host signals; explicit arguments win over detection."""
    if reduced_motion is None:
        reduced_motion = prefers_reduced_motion()
    return HostSignals(
        reduced_motion=reduced_motion,
        hardware_concurrency=cpus if cpus is not None else os.cpu_count(),
        device_memory=memory_gb if memory_gb is not None else detect_device_memory(),
        viewport=Viewport(width=float(width), height=float(height)),
    )
