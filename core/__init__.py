"""core package initialization.

Making `core` an explicit package so imports like `import core.tuning`
work reliably when running `main.py` from the project root.
"""

__all__ = ["app", "events", "host", "scene", "scheduler", "tuning", "visuals"]
