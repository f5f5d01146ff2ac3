#!/usr/bin/env python3
"""Render a scene to a PNG file.

Renders a JSON scene file, or the built-in demo scene when no file is given,
one scanline at a time.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene SCENE       JSON scene file (default: built-in demo scene)
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --output OUTPUT     Output file path (default: render.png)
    --cpu               Force the CPU backend
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --scene examples/scene.json --width 256 --height 256
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene to a PNG file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=512,
        help="Image width in pixels (default: 512)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=512,
        help="Image height in pixels (default: 512)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def initialize_taichi(force_cpu: bool = False) -> str:
    """Initialize Taichi for f64 kernels.

    Prefers CUDA, which supports f64; falls back to CPU.

    Returns:
        Name of the backend being used.
    """
    from src.whitted import init_runtime

    if not force_cpu:
        try:
            init_runtime(ti.cuda)
            return "CUDA"
        except Exception:
            pass

    init_runtime(ti.cpu)
    return "CPU"


def render_scene(
    scene_path: str | None = None,
    width: int = 512,
    height: int = 512,
    output_path: str = "render.png",
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        scene_path: JSON scene file, or None for the demo scene.
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.whitted.preview.export import save_png_from_array
    from src.whitted.scene.demo import create_demo_scene
    from src.whitted.scene.loader import load_scene

    if scene_path is None:
        if not quiet:
            print("Creating demo scene...")
        scene = create_demo_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path}...")
        scene = load_scene(scene_path)

    if not quiet:
        print(
            f"Rendering {width}x{height} ({scene.shape_count} shapes, "
            f"{scene.light_count} lights, depth {scene.max_reflection_depth})..."
        )

    start_time = time.time()
    frame = np.zeros((height, width, 3), dtype=np.float64)
    for line in range(height):
        frame[line] = scene.render_line(width, height, line)
        if not quiet and (line + 1) % 16 == 0:
            print(f"\r  Progress: {line + 1}/{height} lines", end="", flush=True)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png_from_array(frame, output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    backend = initialize_taichi(force_cpu=args.cpu)
    if not args.quiet:
        print(f"Using {backend} backend")

    try:
        render_scene(
            scene_path=args.scene,
            width=args.width,
            height=args.height,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
