import numpy as np
import pytest

from pbtracer.ray import HitInfo, Material, Ray


def test_hit_at_zero_is_origin():
    ray = Ray((1.0, 2.0, 3.0), (0.0, 0.0, 1.0))
    assert np.allclose(ray.hit(0.0), ray.origin)


@pytest.mark.parametrize("t", [0.5, 2.0, -1.5, 10.0])
def test_hit_moves_along_direction(t):
    ray = Ray((1.0, -2.0, 0.5), (0.3, 0.4, -0.2))
    assert np.allclose(ray.hit(t) - ray.origin, t * ray.direction)


def test_object_from_world_identity_keeps_ray():
    ray = Ray((1.0, 2.0, 3.0), (0.0, 1.0, 0.0))
    moved = ray.object_from_world(np.eye(4))
    assert np.allclose(moved.origin, ray.origin)
    assert np.allclose(moved.direction, ray.direction)


def test_object_from_world_translation_moves_origin_only():
    shift = np.array([2.0, -1.0, 4.0])
    matrix = np.eye(4)
    matrix[:3, 3] = shift
    ray = Ray((1.0, 1.0, 1.0), (0.0, 0.0, 1.0))
    moved = ray.object_from_world(matrix)
    assert np.allclose(moved.origin, ray.origin + shift)
    assert np.allclose(moved.direction, ray.direction)


def test_object_from_world_inverse_round_trip():
    angle = 0.7
    matrix = np.array(
        [
            [np.cos(angle), -np.sin(angle), 0.0, 1.0],
            [np.sin(angle), np.cos(angle), 0.0, 2.0],
            [0.0, 0.0, 2.0, -3.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )
    ray = Ray((0.5, -0.25, 1.0), (0.2, 0.3, 0.9))
    back = ray.object_from_world(matrix).object_from_world(np.linalg.inv(matrix))
    assert np.allclose(back.origin, ray.origin)
    assert np.allclose(back.direction, ray.direction)


def test_object_from_world_rejects_bad_matrix():
    ray = Ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        ray.object_from_world(np.eye(3))


def test_ray_rejects_bad_vector():
    with pytest.raises(ValueError):
        Ray((0.0, 0.0), (1.0, 0.0, 0.0))


def test_material_defaults_and_independence():
    first = Material()
    second = Material()
    assert np.allclose(first.albedo, np.ones(3))
    assert np.allclose(first.emission, np.zeros(3))
    assert first.is_specular is False
    first.albedo[0] = 0.25
    assert second.albedo[0] == 1.0


def test_material_converts_sequences():
    material = Material(albedo=[0.5, 0.25, 0.125], is_specular=True, emission=(1, 2, 3))
    assert np.allclose(material.albedo, [0.5, 0.25, 0.125])
    assert np.allclose(material.emission, [1.0, 2.0, 3.0])
    assert material.is_specular is True


def test_hit_info_defaults():
    info = HitInfo(1.5, (0.0, 1.0, 0.0), (0.0, 0.0, 1.0))
    assert info.t == 1.5
    assert info.material is None
    assert (info.bounds_test_count, info.triangle_test_count, info.bounds_depth) == (0, 0, 0)
    assert np.allclose(info.normal, [0.0, 0.0, 1.0])