"""JSON scene files.

A scene file holds tagged shape entries, one or more lights, the camera pose
and the reflection depth:

    {
        "shapes": [
            {"Sphere": {"center": [0, 0, 10], "radius": 5,
                        "material": {"diffuse_color": [1, 0, 0], ...}}},
            {"Plane": {"point": [0, -5, 0], "normal": [0, 1, 0],
                       "material": {...}}}
        ],
        "light": {"pos": [0, 5, 0], "color": [1, 1, 1]},
        "camera_pos": [0, 0, 0],
        "camera_dir": [0, 0, 1],
        "camera_up": [0, 1, 0],
        "max_reflection": 4
    }

Vectors may also be written as {"x": ..., "y": ..., "z": ...}. A list of
lights goes under "lights"; "light" and "lights" may both be present.

Example:
    >>> from src.whitted.scene.loader import load_scene, save_scene
    >>> scene = load_scene("scene.json")
    >>> save_scene(scene, "copy.json")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from src.whitted.core.tracer import DEFAULT_MAX_REFLECTION_DEPTH
from src.whitted.materials.phong import Material
from src.whitted.scene.manager import Scene, SceneConfig

logger = logging.getLogger(__name__)

_MATERIAL_COLOR_KEYS = ("ambient_color", "diffuse_color", "specular_color")


class SceneLoadError(Exception):
    """Raised when a scene file cannot be read or describes an invalid scene."""


def _parse_vector(value: Any, what: str) -> list[float]:
    if isinstance(value, dict):
        try:
            value = [value["x"], value["y"], value["z"]]
        except KeyError as e:
            raise SceneLoadError(f"{what}: missing component {e}") from e
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise SceneLoadError(f"{what}: expected 3 components, got {value!r}")
    try:
        return [float(v) for v in value]
    except (TypeError, ValueError) as e:
        raise SceneLoadError(f"{what}: non-numeric component in {value!r}") from e


def _parse_material(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SceneLoadError(f"{what}: material must be an object")
    parsed: dict[str, Any] = {}
    for key in _MATERIAL_COLOR_KEYS:
        if key in data:
            parsed[key] = _parse_vector(data[key], f"{what}.{key}")
    for key in ("shininess", "reflectivity"):
        if key in data:
            try:
                parsed[key] = float(data[key])
            except (TypeError, ValueError) as e:
                raise SceneLoadError(f"{what}.{key}: expected a number") from e
    try:
        Material(
            ambient=tuple(parsed.get("ambient_color", (0.0, 0.0, 0.0))),
            diffuse=tuple(parsed.get("diffuse_color", (0.0, 0.0, 0.0))),
            specular=tuple(parsed.get("specular_color", (0.0, 0.0, 0.0))),
            shininess=parsed.get("shininess", 0.0),
            reflectivity=parsed.get("reflectivity", 0.0),
        )
    except ValueError as e:
        raise SceneLoadError(f"{what}: {e}") from e
    return parsed


def _parse_shape(entry: Any, index: int) -> dict[str, Any]:
    what = f"shapes[{index}]"
    if not isinstance(entry, dict) or len(entry) != 1:
        raise SceneLoadError(f"{what}: expected a single-key object like {{'Sphere': {{...}}}}")
    (tag, params), = entry.items()
    if not isinstance(params, dict):
        raise SceneLoadError(f"{what}.{tag}: expected an object")
    try:
        material = _parse_material(params.get("material", {}), f"{what}.material")
        if tag == "Sphere":
            radius = float(params["radius"])
            if not radius > 0.0:
                raise SceneLoadError(f"{what}: radius must be positive, got {radius}")
            body = {
                "center": _parse_vector(params["center"], f"{what}.center"),
                "radius": radius,
                "material": material,
            }
        elif tag == "Plane":
            normal = _parse_vector(params["normal"], f"{what}.normal")
            if not any(normal):
                raise SceneLoadError(f"{what}: normal must be non-zero")
            body = {
                "point": _parse_vector(params["point"], f"{what}.point"),
                "normal": normal,
                "material": material,
            }
        else:
            raise SceneLoadError(f"{what}: unknown shape type {tag!r}")
    except KeyError as e:
        raise SceneLoadError(f"{what}: missing key {e}") from e
    except (TypeError, ValueError) as e:
        raise SceneLoadError(f"{what}: {e}") from e
    return {tag: body}


def _parse_light(entry: Any, what: str) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise SceneLoadError(f"{what}: expected an object")
    position = entry.get("pos", entry.get("position"))
    if position is None:
        raise SceneLoadError(f"{what}: missing key 'pos'")
    return {
        "pos": _parse_vector(position, f"{what}.pos"),
        "color": _parse_vector(entry.get("color", (1.0, 1.0, 1.0)), f"{what}.color"),
    }


def config_from_dict(data: Any) -> SceneConfig:
    """Validate a decoded scene document and build a SceneConfig.

    Raises:
        SceneLoadError: If a required key is missing or a value is invalid.
    """
    if not isinstance(data, dict):
        raise SceneLoadError("Scene document must be a JSON object")

    shapes = data.get("shapes", [])
    if not isinstance(shapes, list):
        raise SceneLoadError("'shapes' must be a list")

    lights: list[dict[str, Any]] = []
    if "light" in data:
        lights.append(_parse_light(data["light"], "light"))
    raw_lights = data.get("lights", [])
    if not isinstance(raw_lights, list):
        raise SceneLoadError("'lights' must be a list")
    lights.extend(_parse_light(entry, f"lights[{i}]") for i, entry in enumerate(raw_lights))

    for key in ("camera_pos", "camera_dir", "camera_up"):
        if key not in data:
            raise SceneLoadError(f"Missing required key {key!r}")

    max_reflection = data.get("max_reflection", DEFAULT_MAX_REFLECTION_DEPTH)
    if isinstance(max_reflection, bool) or not isinstance(max_reflection, int) or max_reflection < 0:
        raise SceneLoadError(f"'max_reflection' must be a non-negative integer, got {max_reflection!r}")

    return SceneConfig(
        shapes=[_parse_shape(entry, i) for i, entry in enumerate(shapes)],
        lights=lights,
        camera_pos=_parse_vector(data["camera_pos"], "camera_pos"),
        camera_dir=_parse_vector(data["camera_dir"], "camera_dir"),
        camera_up=_parse_vector(data["camera_up"], "camera_up"),
        max_reflection=max_reflection,
    )


def scene_from_json(text: str) -> Scene:
    """Build a scene from JSON text.

    Raises:
        SceneLoadError: If the text is not valid JSON or not a valid scene.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SceneLoadError(f"Malformed scene JSON: {e}") from e
    config = config_from_dict(data)
    scene = Scene()
    scene.from_config(config)
    logger.debug(
        "Loaded scene with %d shapes and %d lights", scene.shape_count, scene.light_count
    )
    return scene


def load_scene(path: str | Path) -> Scene:
    """Load a scene from a JSON file.

    Raises:
        SceneLoadError: If the file cannot be read or is not a valid scene.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SceneLoadError(f"Cannot read scene file {path}: {e}") from e
    logger.debug("Loading scene from %s", path)
    return scene_from_json(text)


def save_scene(scene: Scene, path: str | Path) -> None:
    """Write a scene to a JSON file that load_scene() accepts."""
    path = Path(path)
    path.write_text(json.dumps(scene.to_dict(), indent=2), encoding="utf-8")
    logger.debug("Saved scene to %s", path)
