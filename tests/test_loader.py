"""Unit tests for JSON scene files.

Tests cover:
- Loading the tagged shape format with single and multiple lights
- Vector notation as lists or {x, y, z} objects
- Saving and reloading
- Error reporting for unreadable, malformed and invalid files
"""

import json

import pytest

SCENE = {
    "shapes": [
        {
            "Sphere": {
                "center": [0.0, 0.0, 10.0],
                "radius": 5.0,
                "material": {
                    "ambient_color": [0.0, 0.0, 0.0],
                    "specular_color": [1.0, 1.0, 1.0],
                    "diffuse_color": [1.0, 0.0, 0.0],
                    "shininess": 15.0,
                    "reflectivity": 0.3,
                },
            }
        },
        {
            "Plane": {
                "point": {"x": 0.0, "y": -5.0, "z": 0.0},
                "normal": {"x": 0.0, "y": 1.0, "z": 0.0},
                "material": {"diffuse_color": [0.5, 0.5, 0.5], "reflectivity": 0.1},
            }
        },
    ],
    "light": {"pos": [0.0, 5.0, 0.0], "color": [1.0, 1.0, 1.0]},
    "camera_pos": [0.0, 0.0, 0.0],
    "camera_dir": [0.0, 0.0, 1.0],
    "camera_up": [0.0, 1.0, 0.0],
    "max_reflection": 3,
}


def _with(**changes):
    data = json.loads(json.dumps(SCENE))
    data.update(changes)
    return data


class TestLoadScene:
    """Tests for loading scene files."""

    def test_load_from_file(self, tmp_path):
        """Test loading shapes, light, camera and depth from a file."""
        from src.whitted.scene.loader import load_scene
        from src.whitted.scene.manager import PlaneInfo, SphereInfo

        path = tmp_path / "scene.json"
        path.write_text(json.dumps(SCENE))
        scene = load_scene(path)

        assert scene.shape_count == 2
        assert isinstance(scene.shapes[0], SphereInfo)
        assert isinstance(scene.shapes[1], PlaneInfo)
        assert scene.shapes[0].material.diffuse == (1.0, 0.0, 0.0)
        assert scene.shapes[0].material.shininess == 15.0
        assert scene.shapes[1].point == (0.0, -5.0, 0.0)
        assert scene.light_count == 1
        assert scene.max_reflection_depth == 3
        assert scene.camera_dir == pytest.approx((0.0, 0.0, 1.0))

    def test_missing_material_keys_default_to_zero(self):
        """Test omitted material entries default to black / zero."""
        from src.whitted.scene.loader import scene_from_json

        scene = scene_from_json(json.dumps(SCENE))
        plane_material = scene.shapes[1].material
        assert plane_material.specular == (0.0, 0.0, 0.0)
        assert plane_material.shininess == 0.0

    def test_light_and_lights_combined(self):
        """Test 'light' and 'lights' may both be given."""
        from src.whitted.scene.loader import scene_from_json

        data = _with(lights=[{"pos": [1, 2, 3], "color": [0.5, 0.5, 0.5]}, {"pos": [4, 5, 6]}])
        scene = scene_from_json(json.dumps(data))

        assert scene.light_count == 3
        assert scene.lights[0].position == (0.0, 5.0, 0.0)
        assert scene.lights[1].color == (0.5, 0.5, 0.5)
        assert scene.lights[2].color == (1.0, 1.0, 1.0)

    def test_max_reflection_defaults(self):
        """Test the reflection depth defaults to 4."""
        from src.whitted.scene.loader import scene_from_json

        data = _with()
        del data["max_reflection"]
        assert scene_from_json(json.dumps(data)).max_reflection_depth == 4

    def test_loaded_scene_renders(self):
        """Test a loaded scene traces the sphere under the camera."""
        from src.whitted.scene.loader import scene_from_json

        scene = scene_from_json(json.dumps(SCENE))
        color = scene.trace((0, 0, 0), (0, 0, 1))
        assert color.r > 0.0
        assert color.b == pytest.approx(color.g)


class TestSaveScene:
    """Tests for saving scene files."""

    def test_save_and_reload(self, tmp_path):
        """Test a saved scene reloads to the same description."""
        from src.whitted.scene.loader import load_scene, save_scene, scene_from_json

        scene = scene_from_json(json.dumps(SCENE))
        scene.move_forward()
        original = scene.to_dict()

        path = tmp_path / "saved.json"
        save_scene(scene, path)
        reloaded = load_scene(path)

        assert reloaded.to_dict() == original
        assert reloaded.camera_pos == pytest.approx((0.0, 0.0, 1.0))

    def test_saved_file_is_plain_json(self, tmp_path):
        """Test the saved file uses the tagged shape format."""
        from src.whitted.scene.loader import save_scene, scene_from_json

        path = tmp_path / "saved.json"
        save_scene(scene_from_json(json.dumps(SCENE)), path)
        data = json.loads(path.read_text())

        assert list(data["shapes"][0]) == ["Sphere"]
        assert list(data["shapes"][1]) == ["Plane"]
        assert data["lights"][0]["pos"] == [0.0, 5.0, 0.0]


class TestLoadErrors:
    """Tests for invalid scene files."""

    def test_missing_file(self, tmp_path):
        """Test a missing file raises SceneLoadError."""
        from src.whitted.scene.loader import SceneLoadError, load_scene

        with pytest.raises(SceneLoadError):
            load_scene(tmp_path / "nope.json")

    def test_malformed_json(self):
        """Test malformed JSON raises SceneLoadError chained from the parser."""
        from src.whitted.scene.loader import SceneLoadError, scene_from_json

        with pytest.raises(SceneLoadError) as excinfo:
            scene_from_json("{not json")
        assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)

    @pytest.mark.parametrize(
        "data",
        [
            _with(shapes=[{"Cube": {"center": [0, 0, 0]}}]),
            _with(shapes=[{"Sphere": {"center": [0, 0, 0]}}]),
            _with(shapes=[{"Sphere": {"center": [0, 0, 0], "radius": -1}}]),
            _with(shapes=[{"Plane": {"point": [0, 0, 0], "normal": [0, 0, 0]}}]),
            _with(shapes=[{"Sphere": {"center": [0, 0], "radius": 1}}]),
            _with(shapes=[{"Sphere": {"center": {"x": 0, "y": 0}, "radius": 1}}]),
            _with(
                shapes=[
                    {
                        "Sphere": {
                            "center": [0, 0, 0],
                            "radius": 1,
                            "material": {"reflectivity": 2.0},
                        }
                    }
                ]
            ),
            _with(light={"color": [1, 1, 1]}),
            _with(max_reflection=-1),
            _with(shapes={"Sphere": {}}),
            [1, 2, 3],
        ],
    )
    def test_invalid_scene(self, data):
        """Test invalid scene documents raise SceneLoadError."""
        from src.whitted.scene.loader import SceneLoadError, scene_from_json

        with pytest.raises(SceneLoadError):
            scene_from_json(json.dumps(data))

    def test_missing_camera_key(self):
        """Test the camera pose is required."""
        from src.whitted.scene.loader import SceneLoadError, scene_from_json

        data = _with()
        del data["camera_up"]
        with pytest.raises(SceneLoadError, match="camera_up"):
            scene_from_json(json.dumps(data))
