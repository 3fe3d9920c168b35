"""
core/app.py — Pygame application shell

Handles the window, main loop, and scene stack.
The backdrop itself is a Scene; the shell just feeds it events, frame
time, and a surface to draw on.

    app = App(title="CodeQuest", width=1280, height=720)
    app.push_scene(BackdropScene(controller, bus))
    app.run()
"""

from __future__ import annotations
import pygame
from core.scene import Scene


class App:
    def __init__(self, title: str = "CodeQuest", width: int = 1280,
                 height: int = 720, fps: int = 60):
        pygame.init()
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()
        self.running = True
        self.fps = fps
        self.dt = 0.0

        # Scene stack — only the top scene is active
        self._scenes: list[Scene] = []

        self.font = pygame.font.SysFont("monospace", 14)

    @property
    def size(self) -> tuple[int, int]:
        return self.screen.get_size()

    # -- Scene management --

    @property
    def scene(self) -> Scene | None:
        return self._scenes[-1] if self._scenes else None

    def push_scene(self, scene: Scene):
        if self._scenes:
            self._scenes[-1].on_exit(self)
        self._scenes.append(scene)
        if scene.title:
            pygame.display.set_caption(scene.title)
        scene.on_enter(self)

    def pop_scene(self):
        if self._scenes:
            self._scenes[-1].on_exit(self)
            self._scenes.pop()
        if self._scenes:
            self._scenes[-1].on_enter(self)
        else:
            self.running = False

    # -- Main loop --

    def run(self):
        while self.running:
            self.dt = self.clock.tick(self.fps) / 1000.0

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                if event.type == pygame.VIDEORESIZE:
                    self.screen = pygame.display.set_mode(
                        (event.w, event.h), pygame.RESIZABLE)
                if self.scene:
                    self.scene.handle_event(event, self)

            if not self.running:
                break

            if self.scene:
                self.scene.update(self.dt, self)
                self.scene.draw(self.screen, self)

            pygame.display.flip()

        # Unwind so every scene gets its on_exit (page unload)
        while self._scenes:
            self._scenes.pop().on_exit(self)
        pygame.quit()

    # -- Convenience --

    def draw_text(self, surface: pygame.Surface, text: str, x: int, y: int,
                  color=(255, 255, 255), font=None):
        """Quick text draw. Returns the rect for layout chaining."""
        f = font or self.font
        img = f.render(text, True, color)
        return surface.blit(img, (x, y))
