"""logic — Backdrop systems package.

Top-level modules
-----------------
particles        — glyph particle record, per-tick update, pool arena
particle_system  — generation schedule, visibility/resize handling, teardown
governor         — startup particle count from host hardware
effects          — pointer trail, click bursts, scroll parallax
controller       — single facade the window shell talks to
"""
