"""core/tuning.py — Data-driven tuning constants.

Backdrop numbers (particle counts, timings, thresholds) live in
``data/tuning.toml`` and are loaded once at startup.  Read a value with::

    from core.tuning import get
    chance = get("effects", "trail_chance", 0.02)

or a whole table with ``section("particles")``.  Anything missing falls
back to the default the caller passes, so the file is optional.

Press F4 in the backdrop window to ``reload()``.
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib                # pip install tomli


_data: dict = {}
_path: Path | None = None


def load(path: str | Path | None = None) -> bool:
    """Load (or reload) tuning constants from *path*.

    If *path* is ``None``, default to ``data/tuning.toml`` relative to
    the project root (one level above ``core/``).  Returns False when
    the file was missing or unreadable and defaults are in effect.
    """
    global _data, _path

    if path is None:
        root = Path(__file__).resolve().parent.parent
        path = root / "data" / "tuning.toml"
    else:
        path = Path(path)

    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found — using defaults")
        _data = {}
        return False

    try:
        with open(path, "rb") as f:
            _data = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        print(f"[TUNING] {path} is not valid TOML ({exc}) — using defaults")
        _data = {}
        return False

    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {path}")
    return True


def load_dict(data: dict) -> None:
    """Replace the loaded values with *data* (tests, CLI overrides)."""
    global _data
    _data = dict(data)


def reload() -> bool:
    """Re-read the tuning file from disk (hot-reload)."""
    return load(_path)


def _lookup(section_path: str):
    node = _data
    for part in section_path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
        if node is None:
            return None
    return node


def get(section_name: str, key: str, default=None):
    """Read a tuning value.

    *section_name* uses dot-notation to traverse nested tables, e.g.
    ``"particles.burst"`` looks up ``[particles.burst]``.

    >>> get("particles", "no_such_key", 3.0)
    3.0
    """
    node = _lookup(section_name)
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def section(section_path: str) -> dict:
    """Return an entire section dict (shallow copy), or empty dict."""
    node = _lookup(section_path)
    if isinstance(node, dict):
        return dict(node)
    return {}


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
