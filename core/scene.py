"""
core/scene.py — Scene interface

A Scene is one full-window screen. The app keeps a stack; only the top
one receives events, frame time and draw calls. When a scene is pushed
its ``title`` (if any) becomes the window caption.

The backdrop (``scenes/backdrop_scene.py``) is the only scene today,
and it uses ``on_exit`` as its page-unload hook, so anything it owns
must be released there.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pygame
    from core.app import App


class Scene:
    title: str = ""

    def on_enter(self, app: App):
        """Pushed, or revealed by the scene above being popped."""

    def on_exit(self, app: App):
        """Popped, covered, or the window is closing."""

    def handle_event(self, event: pygame.event.Event, app: App):
        """One raw pygame event."""

    def update(self, dt: float, app: App):
        """Advance by dt seconds of wall time."""

    def draw(self, surface: pygame.Surface, app: App):
        """Draw the whole frame onto *surface*."""
