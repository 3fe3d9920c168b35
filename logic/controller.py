"""logic/controller.py — Single entry point the shell talks to.

Wraps the one running ParticleSystem (and the pointer effects) so the
rest of the program can pause, resume, tear down or resize the backdrop
without holding a reference to the system itself::

    ctl = ParticleController(document, ParticleConfig.from_tuning(), signals, bus)
    ctl.start()
    ctl.set_particle_count(40)
"""

from __future__ import annotations
import random
from dataclasses import replace

from components.particles import HostSignals, ParticleConfig
from core.events import EventBus, PageUnload
from core.visuals import Document
from logic.effects import AmbientEffects
from logic.governor import apply_performance_governor
from logic.particle_system import ParticleSystem


class ParticleController:
    def __init__(self, document: Document, config: ParticleConfig,
                 signals: HostSignals, bus: EventBus | None = None,
                 rng: random.Random | None = None):
        self.document = document
        self.config = config
        self.signals = signals
        self.bus = bus
        self.rng = rng or random.Random()
        self.system: ParticleSystem | None = None
        self.effects: AmbientEffects | None = None
        self._started = False

    def start(self) -> ParticleSystem | None:
        """Apply the governor once and build the system.

        Returns ``None`` when the reduced-motion preference is set; in
        that case nothing is ever constructed.
        """
        if self._started:
            return self.system
        self._started = True
        self.config = apply_performance_governor(self.config, self.signals)
        if self.signals.reduced_motion:
            print("[PARTICLES] reduced motion requested — backdrop disabled")
            return None
        self.system = self._build()
        self.effects = self._build_effects()
        if self.bus is not None:
            self.bus.subscribe("PageUnload", self.on_unload)
        return self.system

    def _build(self) -> ParticleSystem:
        system = ParticleSystem(self.document, self.config,
                                self.signals.viewport, self.bus, self.rng)
        system.init()
        return system

    def _build_effects(self) -> AmbientEffects:
        return AmbientEffects(self.document, self.signals.viewport,
                              self.bus, self.rng, colors=self.config.colors)

    # ── external control ─────────────────────────────────────────────

    def pause(self) -> bool:
        return self.system.pause() if self.system else False

    def resume(self) -> bool:
        return self.system.resume() if self.system else False

    def destroy(self) -> bool:
        """Tear down the system and the pointer effects with it."""
        if self.effects is not None:
            self.effects.destroy()
            self.effects = None
        return self.system.destroy() if self.system else False

    def set_particle_count(self, count: int) -> ParticleSystem | None:
        """Rebuild the running system with a new capacity."""
        self.config = replace(self.config, particle_count=count)
        if self.system is not None:
            self.system.destroy()
            self.system = self._build()
        return self.system

    def reload_config(self) -> ParticleSystem | None:
        """Rebuild from the current tuning values, keeping the particle count.

        Call after ``tuning.reload()``.  An invalid ``[particles]``
        section leaves the running system untouched.
        """
        try:
            fresh = ParticleConfig.from_tuning()
        except (TypeError, ValueError) as e:
            print(f"[PARTICLES] tuning reload rejected: {e}")
            return self.system
        self.config = replace(fresh, particle_count=self.config.particle_count)
        if self.system is not None:
            self.system.destroy()
            self.system = self._build()
        if self.effects is not None:
            self.effects.destroy()
            self.effects = self._build_effects()
        print(f"[PARTICLES] tuning reloaded (count={self.config.particle_count})")
        return self.system

    # ── frame / teardown ─────────────────────────────────────────────

    def update(self, dt: float):
        if self.system is not None:
            self.system.update(dt)
        if self.effects is not None:
            self.effects.update(dt)

    def on_unload(self, event: PageUnload):
        self.shutdown()

    def shutdown(self):
        if self.system is not None:
            self.system.destroy()
        if self.effects is not None:
            self.effects.destroy()
        if self.bus is not None:
            self.bus.unsubscribe("PageUnload", self.on_unload)
