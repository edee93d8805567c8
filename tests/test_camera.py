import math

import numpy as np
import pytest

from pbtracer.camera import Camera, Film
from pbtracer.rgb import RGB


def test_new_film_pixels_are_empty():
    film = Film(4, 3)
    pixel = film.pixel(3, 2)
    assert pixel.sample_count == 0
    assert np.array_equal(pixel.color, np.zeros(3))


def test_add_sample_accumulates():
    film = Film(4, 3)
    film.add_sample(1, 2, (0.25, 0.5, 1.0))
    film.add_sample(1, 2, (0.25, 0.5, 1.0))
    pixel = film.pixel(1, 2)
    assert pixel.sample_count == 2
    assert np.allclose(pixel.color, [0.5, 1.0, 2.0])
    assert film.pixel(2, 1).sample_count == 0


def test_pixel_returns_copy():
    film = Film(2, 2)
    film.add_sample(0, 0, (1.0, 1.0, 1.0))
    snapshot = film.pixel(0, 0)
    snapshot.color[:] = 9.0
    assert np.allclose(film.pixel(0, 0).color, [1.0, 1.0, 1.0])


def test_clear_drops_samples():
    film = Film(2, 2)
    film.add_sample(0, 1, (1.0, 0.0, 0.0))
    film.clear()
    assert film.pixel(0, 1).sample_count == 0
    assert np.array_equal(film.pixel(0, 1).color, np.zeros(3))


@pytest.mark.parametrize("coord", [(4, 0), (0, 3), (-1, 0)])
def test_pixel_out_of_range(coord):
    film = Film(4, 3)
    with pytest.raises(IndexError):
        film.pixel(*coord)
    with pytest.raises(IndexError):
        film.add_sample(*coord, (1.0, 1.0, 1.0))


def test_film_requires_positive_size():
    with pytest.raises(ValueError):
        Film(0, 3)


def test_ppm_header_and_size():
    film = Film(4, 3)
    data = film.to_ppm()
    header = b"P6\n4 3\n255\n"
    assert data.startswith(header)
    assert len(data) == len(header) + 4 * 3 * 3


def test_ppm_pixels_match_rgb_encoding():
    film = Film(3, 2)
    film.add_sample(2, 1, (0.25, 0.5, 1.0))
    film.add_sample(2, 1, (0.25, 0.5, 1.0))
    film.add_sample(0, 0, (4.0, -1.0, 0.1))
    data = film.to_ppm()
    body = data[len(b"P6\n3 2\n255\n"):]

    def channels(x, y):
        idx = (y * 3 + x) * 3
        return tuple(body[idx:idx + 3])

    expected = RGB.from_color((0.25, 0.5, 1.0))
    assert channels(2, 1) == (expected.red, expected.green, expected.blue)
    other = RGB.from_color((4.0, -1.0, 0.1))
    assert channels(0, 0) == (other.red, other.green, other.blue)
    assert channels(1, 0) == (0, 0, 0)


def test_save_writes_ppm(tmp_path):
    film = Film(2, 2)
    film.add_sample(1, 1, (0.5, 0.5, 0.5))
    target = tmp_path / "out.ppm"
    written = film.save(target)
    assert written == target
    assert target.read_bytes() == film.to_ppm()


def test_center_ray_points_at_viewpoint():
    film = Film(3, 3)
    camera = Camera(film, (-3.0, 0.0, 0.0), (0.0, 0.0, 0.0), 45.0)
    ray = camera.generate_ray((1, 1))
    assert np.allclose(ray.origin, [-3.0, 0.0, 0.0])
    assert np.allclose(ray.direction, [1.0, 0.0, 0.0])


def test_top_edge_ray_is_half_fovy_from_forward():
    film = Film(3, 2)
    camera = Camera(film, (0.0, 0.0, 0.0), (0.0, 0.0, 5.0), 45.0)
    ray = camera.generate_ray((1, 0), (0.5, 0.0))
    angle = math.degrees(math.acos(np.dot(ray.direction, [0.0, 0.0, 1.0])))
    assert angle == pytest.approx(22.5)
    assert ray.direction[1] > 0.0


def test_rays_are_unit_and_flip_vertically():
    film = Film(8, 6)
    camera = Camera(film, (1.0, 2.0, 3.0), (0.0, 0.0, 0.0), 60.0)
    forward = -np.array([1.0, 2.0, 3.0]) / np.linalg.norm([1.0, 2.0, 3.0])
    top = camera.generate_ray((4, 0))
    bottom = camera.generate_ray((4, 5))
    for ray in (top, bottom):
        assert np.linalg.norm(ray.direction) == pytest.approx(1.0)
        assert np.dot(ray.direction, forward) > 0.0
    assert top.direction[1] > bottom.direction[1]


def test_camera_keeps_film_and_rejects_degenerate_view():
    film = Film(2, 2)
    camera = Camera(film, (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 45.0)
    assert camera.film is film
    with pytest.raises(ValueError):
        Camera(film, (1.0, 1.0, 1.0), (1.0, 1.0, 1.0), 45.0)