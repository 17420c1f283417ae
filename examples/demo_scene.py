#!/usr/bin/env python3
"""Scripted scene: place, scale, spin, drag and hide a model.

Drives a ControllerGestures engine with synthetic controller input and
lets an ObjectManipulator apply the events to a Transform, printing the
model state after each step.

Usage:
    python examples/demo_scene.py
"""

from __future__ import annotations

import logging
import math
import sys
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from controller_gestures import ControllerGestures, ObjectManipulator, SphereTarget, Transform
from controller_gestures.simulate import ScriptedSession


def show(step: str, model: Transform):
    pos = ", ".join(f"{c:+.2f}" for c in model.position)
    print(f"  {step:<8s} visible={model.visible!s:<5s} pos=({pos}) scale={model.scale[0]:.2f}")


def main():
    logging.basicConfig(level=logging.WARNING)

    model = Transform(visible=False)
    target = SphereTarget(radius=0.15, transform=model)
    engine = ControllerGestures(target=target)
    ObjectManipulator(model, on_status=lambda msg: print(f"    > {msg}")).attach(engine)

    # Hidden target: the first press falls through to tap recognition.
    session = ScriptedSession().tap(1).finish()
    session.run(engine)
    show("tap", model)

    session = ScriptedSession(start_time=session.time).pinch(spread=0.1).finish()
    session.run(engine)
    show("pinch", model)

    session = ScriptedSession(start_time=session.time).rotate(math.pi / 4).finish()
    session.run(engine)
    show("rotate", model)

    # Point the primary controller at the model and pull it toward the user.
    aim = model.position + np.array([0.0, 0.0, 0.5])
    session = (
        ScriptedSession(start_time=session.time, primary=aim)
        .activate(0).idle(0.1).move(0.5, velocity0=(0.0, 0.2, 0.0)).deactivate(0).finish()
    )
    session.run(engine)
    show("drag", model)

    session = ScriptedSession(start_time=session.time).swipe().finish()
    session.run(engine)
    show("swipe", model)


if __name__ == "__main__":
    main()
