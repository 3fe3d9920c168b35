"""scenes/backdrop_scene.py — The animated code-glyph backdrop.

Translates raw pygame events into page signals on the event bus, drives
the particle controller once per frame, and draws the scene graph.

Keys:
    P        pause / resume generation
    + / -    double / halve the particle count (rebuilds the system)
    F4       reload data/tuning.toml and rebuild with the new values
    Esc      close
"""

from __future__ import annotations
import pygame

from components.particles import SystemState
from core import tuning
from core.app import App
from core.events import (
    Clicked, EventBus, PageUnload, PointerMoved, Scrolled,
    ViewportResized, VisibilityChanged,
)
from core.scene import Scene
from core.visuals import Document
from logic.controller import ParticleController
from scenes.backdrop_draw import draw_document, draw_hud, parse_color

_SCROLL_STEP = 40.0

_HIDDEN_EVENTS = (pygame.WINDOWMINIMIZED, pygame.WINDOWHIDDEN)
_SHOWN_EVENTS = (pygame.WINDOWRESTORED, pygame.WINDOWSHOWN)


class BackdropScene(Scene):
    title = "CodeQuest"

    def __init__(self, controller: ParticleController, bus: EventBus,
                 document: Document, background: str = "#0f172a"):
        self.controller = controller
        self.bus = bus
        self.document = document
        self.background = parse_color(background)
        self.show_hud = True
        self._hud_rect = pygame.Rect(0, 0, 0, 0)
        self._scroll = 0.0
        self._hidden = False
        self._unloaded = False

    def on_enter(self, app: App):
        self.controller.start()

    def on_exit(self, app: App):
        if self._unloaded:
            return
        self._unloaded = True
        self.bus.emit(PageUnload())
        self.bus.drain()

    # ── events ───────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event, app: App):
        if event.type in _HIDDEN_EVENTS and not self._hidden:
            self._hidden = True
            self.bus.emit(VisibilityChanged(hidden=True))
        elif event.type in _SHOWN_EVENTS and self._hidden:
            self._hidden = False
            self.bus.emit(VisibilityChanged(hidden=False))
        elif event.type == pygame.VIDEORESIZE:
            self.bus.emit(ViewportResized(width=float(event.w),
                                          height=float(event.h)))
        elif event.type == pygame.MOUSEMOTION:
            self.bus.emit(PointerMoved(x=float(event.pos[0]),
                                       y=float(event.pos[1])))
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.bus.emit(Clicked(x=float(event.pos[0]), y=float(event.pos[1]),
                                  interactive=self._hud_rect.collidepoint(event.pos)))
        elif event.type == pygame.MOUSEWHEEL:
            self._scroll = max(0.0, self._scroll - event.y * _SCROLL_STEP)
            self.bus.emit(Scrolled(offset=self._scroll))
        elif event.type == pygame.KEYDOWN:
            self._handle_key(event, app)

    def _handle_key(self, event: pygame.event.Event, app: App):
        ctl = self.controller
        if event.key == pygame.K_ESCAPE:
            app.pop_scene()
        elif event.key == pygame.K_p:
            if ctl.system and ctl.system.state is SystemState.PAUSED:
                ctl.resume()
            else:
                ctl.pause()
        elif event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
            ctl.set_particle_count(max(1, ctl.config.particle_count * 2))
        elif event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
            ctl.set_particle_count(ctl.config.particle_count // 2)
        elif event.key == pygame.K_F4:
            tuning.reload()
            ctl.reload_config()
        elif event.key == pygame.K_h:
            self.show_hud = not self.show_hud

    # ── frame ────────────────────────────────────────────────────────

    def update(self, dt: float, app: App):
        self.bus.drain()
        self.controller.update(dt)

    def draw(self, surface: pygame.Surface, app: App):
        surface.fill(self.background)
        effects = self.controller.effects
        draw_document(surface, self.document,
                      effects.parallax_offset if effects else None)
        if self.show_hud:
            self._hud_rect = draw_hud(surface, app, self._hud_lines())
        else:
            self._hud_rect = pygame.Rect(0, 0, 0, 0)

    def _hud_lines(self) -> list[str]:
        system = self.controller.system
        if system is None:
            return ["backdrop disabled (reduced motion)   [Esc] quit"]
        return [
            f"{system.state.value}  live {system.live_count}/{system.config.particle_count}",
            "[P] pause  [+/-] count  [F4] reload tuning  [H] hide  [Esc] quit",
        ]
