#!/usr/bin/env python3
"""Interactive walk-through of a scene.

Opens a window that re-renders the scene every frame while the camera is
moved with the keyboard and mouse.

Usage:
    python -m examples.interactive_scene [--scene SCENE] [--resolution N] [--orbit]

Controls:
    - W / S: Move forward / back
    - Drag with left mouse button: Look around
    - P: Save the current frame as a timestamped PNG
    - Escape: Quit

Frame rate is reported on stderr every 10 frames.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive scene viewer.")
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "-r",
        "--resolution",
        type=int,
        default=512,
        help="Render resolution (default: 512)",
    )
    parser.add_argument(
        "--orbit",
        action="store_true",
        help="Animate the demo scene's first light",
    )
    return parser.parse_args()


def initialize_taichi() -> str:
    """Initialize Taichi with f64 kernels, preferring CUDA over CPU.

    Returns:
        Name of the backend being used.
    """
    from src.whitted import init_runtime

    try:
        init_runtime(ti.cuda)
        return "CUDA"
    except Exception:
        pass

    init_runtime(ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.whitted.preview.interactive import InteractiveViewer, ViewerSettings
    from src.whitted.scene.demo import DemoSceneParams, create_demo_scene
    from src.whitted.scene.loader import SceneLoadError, load_scene

    if not InteractiveViewer.is_display_available():
        print("Error: No display available. Cannot run interactive viewer.")
        print("This script requires a graphical display environment.")
        return 1

    if args.scene is not None:
        try:
            scene = load_scene(args.scene)
        except SceneLoadError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        scene = create_demo_scene(DemoSceneParams(orbit_light=args.orbit))

    viewer = InteractiveViewer(scene, ViewerSettings(resolution=args.resolution))

    print("Starting interactive rendering...")
    print("  - W/S to move, drag with the left mouse button to look around")
    print("  - P to save the current frame")
    print("  - Escape to exit")
    print()

    try:
        viewer.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        viewer.close()
        print("Viewer closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
