"""scenes/backdrop_draw.py — Rendering helpers for the backdrop scene.

All pure-draw functions live here so that BackdropScene.draw() stays
thin.  The scene graph is walked in z-order; glyph nodes become rotated
text blits, dot nodes become alpha circles.
"""

from __future__ import annotations
from typing import Callable

import pygame
from core.visuals import Document, Visual

_FONT_NAMES = "monaco,couriernew,dejavusansmono,monospace"
_fonts: dict[int, pygame.font.Font] = {}


def _font(size: float) -> pygame.font.Font:
    px = max(6, int(round(size)))
    f = _fonts.get(px)
    if f is None:
        f = pygame.font.SysFont(_FONT_NAMES, px, bold=True)
        _fonts[px] = f
    return f


def parse_color(value: str) -> tuple[int, int, int]:
    try:
        c = pygame.Color(value)
    except ValueError:
        return (255, 255, 255)
    return (c.r, c.g, c.b)


# ── Nodes ───────────────────────────────────────────────────────────

def draw_glyph(surface: pygame.Surface, v: Visual, dy: float = 0.0):
    alpha = int(255 * max(0.0, min(1.0, v.opacity)))
    if alpha <= 0 or not v.text or v.scale <= 0:
        return
    img = _font(v.font_size).render(v.text, True, parse_color(v.color))
    if v.rotation or v.scale != 1.0:
        # pygame rotates counter-clockwise; CSS rotate() is clockwise
        img = pygame.transform.rotozoom(img, -v.rotation, v.scale)
    img.set_alpha(alpha)
    rect = img.get_rect(center=(int(v.x), int(v.y + dy)))
    surface.blit(img, rect)


def draw_dot(surface: pygame.Surface, v: Visual):
    alpha = int(255 * max(0.0, min(1.0, v.opacity)))
    radius = max(1, int(v.radius * v.scale))
    if alpha <= 0:
        return
    r, g, b = parse_color(v.color)
    d = radius * 2 + 2
    dot = pygame.Surface((d, d), pygame.SRCALPHA)
    pygame.draw.circle(dot, (r, g, b, alpha), (d // 2, d // 2), radius)
    surface.blit(dot, (int(v.x) - d // 2, int(v.y) - d // 2))


# ── Document ────────────────────────────────────────────────────────

def draw_document(
    surface: pygame.Surface,
    document: Document,
    parallax: Callable[[int], float] | None = None,
):
    """Draw every attached node.  *parallax(i)* shifts the i-th backdrop glyph."""
    index = 0
    for v in document.draw_order():
        if v.radius > 0:
            draw_dot(surface, v)
        elif v.text:
            dy = 0.0
            if v.class_name == "particle":
                if parallax is not None:
                    dy = parallax(index)
                index += 1
            draw_glyph(surface, v, dy)


def draw_hud(surface: pygame.Surface, app, lines: list[str]) -> pygame.Rect:
    """Bottom-left help text.  Returns the union rect (clicks there are 'interactive')."""
    h = app.font.get_linesize()
    x = 8
    y = surface.get_height() - h * len(lines) - 8
    rect = pygame.Rect(x, y, 0, 0)
    for i, line in enumerate(lines):
        r = app.draw_text(surface, line, x, y + i * h, color=(148, 163, 184))
        rect.union_ip(r)
    return rect
