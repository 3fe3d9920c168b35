"""
main.py — Bootstrap

1. Load tuning constants
2. Read host signals (reduced motion, CPUs, memory, window size)
3. Build the document, event bus and particle controller
4. Push the backdrop scene
5. Run
"""

from __future__ import annotations
import argparse
from dataclasses import replace

from components.particles import ParticleConfig
from core import tuning
from core.app import App
from core.events import EventBus
from core.host import detect_host
from core.visuals import Document
from logic.controller import ParticleController
from scenes.backdrop_scene import BackdropScene


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CodeQuest animated backdrop")
    parser.add_argument("--tuning", help="path to a tuning.toml (default: data/tuning.toml)")
    parser.add_argument("--reduced-motion", action="store_true", default=None,
                        help="disable all animation")
    parser.add_argument("--cpus", type=int, help="pretend this many logical CPUs")
    parser.add_argument("--memory-gb", type=float, help="pretend this much device memory")
    parser.add_argument("--count", type=int, help="override particle_count")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    tuning.load(args.tuning)

    width = int(tuning.get("window", "width", 1280))
    height = int(tuning.get("window", "height", 720))
    app = App(title="CodeQuest", width=width, height=height,
              fps=int(tuning.get("window", "fps", 60)))

    w, h = app.size
    signals = detect_host(w, h, reduced_motion=args.reduced_motion,
                          cpus=args.cpus, memory_gb=args.memory_gb)
    print(f"[MAIN] host: cpus={signals.hardware_concurrency} "
          f"memory={signals.device_memory and round(signals.device_memory, 1)}GB "
          f"reduced_motion={signals.reduced_motion} viewport={w}x{h}")

    config = ParticleConfig.from_tuning()
    if args.count is not None:
        config = replace(config, particle_count=args.count)

    bus = EventBus()
    document = Document()
    controller = ParticleController(document, config, signals, bus)

    app.push_scene(BackdropScene(controller, bus, document,
                                 background=tuning.get("window", "background", "#0f172a")))
    app.run()


if __name__ == "__main__":
    main()
