#!/usr/bin/env python3
"""controller-gestures benchmark: per-frame recognizer cost.

Replays every scripted scenario many times and times each frame
(pose update, trigger signals and tick). No headset required.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --repeat 200 --fps 90
"""

from __future__ import annotations

import argparse
import gc
import sys
import time
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from controller_gestures import ControllerGestures
from controller_gestures.simulate import SCENARIOS, apply_frame, scenario


def benchmark_scenario(name: str, repeat: int, fps: float) -> dict:
    """Time every frame of `name`, replayed `repeat` times on fresh engines."""
    frames = scenario(name, fps=fps).frames

    # Warmup
    engine = ControllerGestures()
    for frame in frames:
        apply_frame(engine, frame)

    gc.collect()
    times = []
    for _ in range(repeat):
        engine = ControllerGestures()
        engine.subscribe("*", lambda event: None)
        for frame in frames:
            t0 = time.perf_counter()
            apply_frame(engine, frame)
            times.append(time.perf_counter() - t0)

    times_us = np.array(times) * 1e6
    return {
        "frames": len(frames),
        "mean_us": float(np.mean(times_us)),
        "p95_us": float(np.percentile(times_us, 95)),
        "max_us": float(np.max(times_us)),
    }


def print_table(title: str, rows: list[tuple[str, str]]):
    max_key = max(len(r[0]) for r in rows)
    max_val = max(len(r[1]) for r in rows)
    width = max_key + max_val + 7

    print()
    print(f"  +{'-' * width}+")
    print(f"  | {title:<{width-2}} |")
    print(f"  +{'-' * width}+")
    for key, val in rows:
        print(f"  | {key:<{max_key}}   {val:>{max_val}} |")
    print(f"  +{'-' * width}+")


def main():
    parser = argparse.ArgumentParser(description="controller-gestures benchmark")
    parser.add_argument("-r", "--repeat", type=int, default=100, help="Replays per scenario")
    parser.add_argument("--fps", type=float, default=60.0, help="Simulated frame rate")
    args = parser.parse_args()

    rows = []
    for name in SCENARIOS:
        result = benchmark_scenario(name, args.repeat, args.fps)
        rows.append((
            f"{name} ({result['frames']} frames)",
            f"{result['mean_us']:.1f} us mean / {result['p95_us']:.1f} us p95",
        ))

    print_table(f"Per-frame cost at {args.fps:.0f} fps", rows)
    print()


if __name__ == "__main__":
    main()
