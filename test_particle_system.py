"""test_particle_system.py — Headless tests for the particle pool owner.

Drives ParticleSystem with a fixed 50 ms frame and checks:
1. Capacity never exceeded across the whole generation timeline
2. pause / resume / destroy lifecycle
3. Hidden page keeps in-flight particles moving but spawns nothing
4. Debounced resize clamps particles back on-screen
5. Safety-net eviction
6. Governor scenario (3 particles, 2 CPUs → 1)

Run: python test_particle_system.py
"""
from __future__ import annotations
import random, sys, traceback

from components.particles import (
    HostSignals, ParticleConfig, SystemState, Viewport,
)
from core.events import EventBus, ViewportResized, VisibilityChanged
from core.visuals import Document
from logic.governor import apply_performance_governor
from logic.particle_system import CONTAINER_ID, ParticleSystem

# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    print(f"  [FAIL] {label}")
    if detail:
        for line in detail.strip().splitlines():
            print(f"         {line}")


FRAME = 0.05


def _make(count=5, viewport=None, bus=None, seed=42, **overrides):
    cfg = ParticleConfig(particle_count=count, **overrides)
    doc = Document()
    system = ParticleSystem(doc, cfg, viewport or Viewport(960.0, 640.0),
                            bus, random.Random(seed))
    return system, doc


def _advance(system, seconds, check=None):
    for _ in range(int(round(seconds / FRAME))):
        system.update(FRAME)
        if check is not None:
            check(system)


# ════════════════════════════════════════════════════════════════════════
#  TEST 1 — Capacity
# ════════════════════════════════════════════════════════════════════════

def test_capacity_never_exceeded():
    print("\n=== 1: Capacity invariant ===")
    system, doc = _make(count=5, viewport=Viewport(960.0, 200.0))
    assert system.init() is True
    assert system.init() is False
    peak = 0

    def check(s):
        nonlocal peak
        assert len(s.pool) <= s.config.particle_count, len(s.pool)
        assert doc.count("particle") <= s.config.particle_count
        peak = max(peak, len(s.pool))

    _advance(system, 3.0, check)
    assert len(system.pool) == 5, len(system.pool)
    _advance(system, 120.0, check)
    assert peak == 5
    assert system.live_count >= 1, "generation interval should keep refilling"
    ok(f"Pool capped at 5 over 123 s of generation (peak {peak})")


def test_initial_stagger():
    print("\n=== 1b: Staggered start ===")
    system, _ = _make(count=4)
    system.init()
    counts = []
    _advance(system, 0.25)
    counts.append(system.live_count)
    for _ in range(3):
        _advance(system, 0.5)
        counts.append(system.live_count)
    assert counts == [1, 2, 3, 4], counts
    ok(f"One particle per stagger step: {counts}")


# ════════════════════════════════════════════════════════════════════════
#  TEST 2 — Lifecycle
# ════════════════════════════════════════════════════════════════════════

def test_pause_resume_regains_capacity():
    print("\n=== 2: Pause → resume ===")
    system, _ = _make(count=5)
    system.init()
    assert system.pause() is True and system.pause() is False
    assert system.state is SystemState.PAUSED and not system.active
    _advance(system, 3.0)
    assert system.live_count == 0, "paused system created particles"
    assert system.resume() is True and system.resume() is False
    assert system.state is SystemState.ACTIVE and system.active
    _advance(system, 3.0)
    assert system.live_count == 5, system.live_count
    ok("No spawns while paused; full capacity after resume")


def test_pause_keeps_live_particles():
    print("\n=== 2b: Pause keeps particles ===")
    system, doc = _make(count=3)
    system.init()
    _advance(system, 2.0)
    before = {p.pid: p.y for p in system.particles}
    system.pause()
    _advance(system, 0.5)
    assert set(before) == {p.pid for p in system.particles}
    assert all(p.y < before[p.pid] for p in system.particles)
    assert doc.count("particle") == 3
    ok("Pause stops generation only; live particles keep rising")


def test_destroy_is_total_and_repeatable():
    print("\n=== 2c: Destroy ===")
    bus = EventBus()
    system, doc = _make(count=6, bus=bus)
    system.init()
    _advance(system, 4.0)
    assert doc.count("particle") == 6
    assert doc.find(CONTAINER_ID) is system.container
    particles = system.particles
    assert system.destroy() is True
    assert doc.count() == 0 and doc.find(CONTAINER_ID) is None
    assert all(p.disposed and p.visual is None for p in particles)
    assert system.scheduler.pending_count() == 0
    assert bus.subscriber_count("VisibilityChanged") == 0
    assert system.destroy() is False
    assert system.pause() is False and system.resume() is False
    assert system.update(1.0) == 0 and system.create_particle() is None
    ok("Destroy removes every visual and the container; second call is a no-op")


# ════════════════════════════════════════════════════════════════════════
#  TEST 3 — Visibility
# ════════════════════════════════════════════════════════════════════════

def test_hidden_page_stops_generation_only():
    print("\n=== 3: Hidden page ===")
    bus = EventBus()
    system, doc = _make(count=5, viewport=Viewport(800.0, 100.0), bus=bus)
    system.init()
    _advance(system, 2.5)
    assert system.live_count == 5
    tracked = system.particles[-1]
    y0 = tracked.y

    bus.emit(VisibilityChanged(hidden=True))
    bus.drain()
    assert system.state is SystemState.PAUSED
    _advance(system, 1.0)
    assert tracked.disposed or tracked.y < y0, "in-flight particle froze"

    _advance(system, 19.0)
    assert system.live_count == 0, system.live_count
    assert doc.count("particle") == 0

    bus.emit(VisibilityChanged(hidden=False))
    bus.drain()
    assert system.state is SystemState.ACTIVE
    _advance(system, 2.5)
    assert system.live_count == 5, system.live_count
    ok("Particles finish while hidden, nothing new until visible again")


# ════════════════════════════════════════════════════════════════════════
#  TEST 4 — Resize
# ════════════════════════════════════════════════════════════════════════

def test_resize_is_debounced_and_clamps():
    print("\n=== 4: Debounced resize ===")
    bus = EventBus()
    vp = Viewport(960.0, 640.0)
    system, _ = _make(count=3, viewport=vp, bus=bus)
    system.init()
    _advance(system, 1.5)
    p = system.particles[0]
    p.x = 900.0

    bus.emit(ViewportResized(width=700.0, height=640.0))
    bus.drain()
    _advance(system, 0.1)
    assert vp.width == 960.0, "resize applied before debounce"
    bus.emit(ViewportResized(width=500.0, height=480.0))
    bus.drain()
    _advance(system, 0.2)
    assert vp.width == 960.0, "second event should restart the debounce"
    _advance(system, 0.1)
    assert (vp.width, vp.height) == (500.0, 480.0)
    assert abs(p.x - 450.0) <= 3.0, p.x
    assert all(q.x <= 500.0 + 3.0 for q in system.particles)
    ok("Only the last size is applied; off-screen particles pulled to width - 50")


# ════════════════════════════════════════════════════════════════════════
#  TEST 5 — Eviction safety net
# ════════════════════════════════════════════════════════════════════════

def test_eviction_safety_net():
    print("\n=== 5: Eviction ===")
    system, doc = _make(count=2, eviction_delay=1.0)
    system.init()
    _advance(system, 0.1)
    first = system.particles[0]
    assert system.scheduler.has_pending(first.pid, "EVICT")
    _advance(system, 1.1)
    assert first.disposed and first.pid not in system.pool
    assert first.visual is None
    assert doc.count("particle") == len(system.pool)
    ok("A particle still pooled after eviction_delay is disposed and dropped")


def test_reap_cancels_particle_timers():
    print("\n=== 5b: Reap cancels timers ===")
    system, _ = _make(count=1, viewport=Viewport(800.0, 0.0))
    system.init()
    _advance(system, 0.1)
    p = system.particles[0]
    for _ in range(2000):
        system.update(FRAME)
        if p.disposed:
            break
    assert p.disposed and p.pid not in system.pool
    assert not system.scheduler.has_pending(p.pid)
    ok("Natural disposal reaps the entry and cancels its eviction timer")


# ════════════════════════════════════════════════════════════════════════
#  TEST 6 — Governor
# ════════════════════════════════════════════════════════════════════════

def test_governor():
    print("\n=== 6: Performance governor ===")
    base = ParticleConfig(particle_count=20)
    assert apply_performance_governor(base, HostSignals()) is base
    assert apply_performance_governor(
        base, HostSignals(hardware_concurrency=8, device_memory=16.0)) is base
    assert apply_performance_governor(
        base, HostSignals(hardware_concurrency=2)).particle_count == 10
    assert apply_performance_governor(
        base, HostSignals(device_memory=2.0)).particle_count == 10
    low = apply_performance_governor(
        base, HostSignals(hardware_concurrency=2, device_memory=2.0))
    assert low.particle_count == 5 and base.particle_count == 20
    ok("Halves per weak signal, ignores unreported ones, never mutates input")


def test_governor_scenario():
    print("\n=== 6b: 3 particles on 2 CPUs ===")
    cfg = apply_performance_governor(ParticleConfig(particle_count=3),
                                     HostSignals(hardware_concurrency=2))
    assert cfg.particle_count == 1
    system = ParticleSystem(Document(), cfg, Viewport(960.0, 640.0),
                            rng=random.Random(1))
    system.init()
    peak = 0
    for _ in range(int(60 / FRAME)):
        system.update(FRAME)
        peak = max(peak, system.live_count)
    assert peak == 1, peak
    ok("Governor halves 3 → 1 and the system never holds more than 1")


# ═══════════════════════════════════════════════════════════════════════
#  MAIN
# ═══════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    sections = [
        ("Capacity", test_capacity_never_exceeded),
        ("Stagger", test_initial_stagger),
        ("Pause/resume", test_pause_resume_regains_capacity),
        ("Pause keeps particles", test_pause_keeps_live_particles),
        ("Destroy", test_destroy_is_total_and_repeatable),
        ("Hidden page", test_hidden_page_stops_generation_only),
        ("Resize", test_resize_is_debounced_and_clamps),
        ("Eviction", test_eviction_safety_net),
        ("Reap", test_reap_cancels_particle_timers),
        ("Governor", test_governor),
        ("Governor scenario", test_governor_scenario),
    ]

    for name, fn in sections:
        try:
            fn()
        except Exception:
            fail(name, traceback.format_exc())

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Particle System Tests: {_passed} passed, {_failed} failed  "
          f"(total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
