import numpy as np
import pytest

from pbtracer.cli import build_scene, main
from pbtracer.rgb import RGB
from pbtracer.shapes import Sphere

OBJ_TEXT = """\
v -0.5 -0.5 0
v 0.5 -0.5 0
v 0 0.5 0
f 1 2 3
"""


def test_build_scene_layout():
    model = Sphere((0.0, 0.0, 0.0), 0.5)
    scene = build_scene(model)
    infos = scene.shape_infos
    assert len(infos) == 5
    assert infos[0].shape is model
    assert np.allclose(infos[0].material.albedo, RGB(202, 159, 117).to_color())
    assert np.allclose(infos[1].material.emission, RGB(255, 128, 128).to_color())
    assert np.allclose(infos[2].material.emission, RGB(128, 128, 255).to_color())
    assert [info.material.is_specular for info in infos] == [False, False, False, True, False]
    assert np.allclose(infos[4].world_from_object[:3, 3], [0.0, -0.5, 0.0])


def test_build_scene_ray_hits_model_first():
    from pbtracer.ray import Ray

    model = Sphere((0.0, 0.0, 0.0), 0.5)
    scene = build_scene(model)
    hit = scene.intersect(Ray((-3.0, 0.0, 0.0), (1.0, 0.0, 0.0)))
    assert hit.t == pytest.approx(2.5)
    assert hit.material is scene.shape_infos[0].material


def test_main_renders_all_images(tmp_path):
    obj = tmp_path / "tri.obj"
    obj.write_text(OBJ_TEXT)
    out = tmp_path / "out"
    status = main(
        [str(obj), "--output-dir", str(out), "--width", "6", "--height", "4",
         "--spp", "1", "--threads", "2"]
    )
    assert status == 0
    header = b"P6\n6 4\n255\n"
    for name in ("BTC.ppm", "TTC.ppm", "BD.ppm", "Normal.ppm", "RayTrace.ppm"):
        data = (out / name).read_bytes()
        assert data.startswith(header)
        assert len(data) == len(header) + 6 * 4 * 3


def test_main_missing_model_fails(tmp_path):
    status = main([str(tmp_path / "absent.obj"), "--output-dir", str(tmp_path)])
    assert status == 1
    assert not (tmp_path / "BTC.ppm").exists()


def test_main_empty_model_fails(tmp_path):
    obj = tmp_path / "empty.obj"
    obj.write_text("v 0 0 0\n")
    assert main([str(obj), "--output-dir", str(tmp_path)]) == 1