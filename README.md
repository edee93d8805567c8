# pbtracer

A small physically based path tracer. It renders scenes made of spheres,
planes and triangle meshes loaded from Wavefront OBJ files, speeds up mesh
intersection with a bounding volume hierarchy, and writes images as binary
PPM (P6) files.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
pbtracer MODEL.obj [--output-dir DIR] [--width W] [--height H] [--spp N] [--threads T]
```

The command places the OBJ model at the origin of a sample scene with two
glowing spheres, one mirror sphere and a ground plane, looks at it from
`(-3, 0, 0)` with a 45 degree field of view, and renders it five times into
the output directory (default: the current directory):

| File            | Renderer         | Samples per pixel |
|-----------------|------------------|-------------------|
| `BTC.ppm`       | `BTCRenderer`    | 1                 |
| `TTC.ppm`       | `TTCRenderer`    | 1                 |
| `BD.ppm`        | `BDRenderer`     | 1                 |
| `Normal.ppm`    | `NormalRenderer` | 1                 |
| `RayTrace.ppm`  | `RTRenderer`     | `--spp` (64)      |

The image is 768x432 unless `--width` and `--height` say otherwise.
`--threads 0` (the default) uses one worker thread per CPU. If the model
cannot be read, the command logs the error and exits with status 1.

## Library use

```python
from pbtracer.camera import Camera, Film
from pbtracer.ray import Material
from pbtracer.rgb import RGB
from pbtracer.scene import Scene
from pbtracer.shapes import Plane, Sphere
from pbtracer.renderers import RTRenderer

film = Film(192, 108)
camera = Camera(film, (-3.0, 0.0, 0.0), (0.0, 0.0, 0.0), 45.0)

scene = Scene()
sphere = Sphere((0.0, 0.0, 0.0), 1.0)
glow = Material(emission=RGB(255, 128, 128).to_color())
scene.add_shape(sphere, glow, (0.0, 0.0, 2.5))
scene.add_shape(Plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)), Material(), (0.0, -0.5, 0.0))

RTRenderer(camera, scene).render("out.ppm", 16)
```

`Scene.add_shape(shape, material, position, scale, rotate)` scales the shape,
rotates it about x, then y, then z (in degrees) and then translates it.
`Scene.intersect(ray)` returns the nearest `HitInfo` in world space, or
`None`.

### Meshes

`pbtracer.model` reads OBJ files:

- `Model.from_obj(path)` / `parse_obj(lines)` accept `v`, `v/vt`, `v//vn`
  and `v/vt/vn` face corners and negative indices. Faces that are not
  triangles are skipped; triangles without vertex normals get their face
  normal.
- `Model.from_simple_obj(path)` / `parse_simple_obj(lines)` accept only
  triangles written as `v//vn`.

A file with no triangles raises `ValueError`. A `Model` can be added to a
scene like any other shape. The underlying `pbtracer.bvh.BVH` can also be
built directly from `Triangle` objects, with split method `"axis"`, `"sah"`
or `"sah_buckets"` (the default).

### Renderers

- `RTRenderer`: a path tracer with diffuse and mirror materials and emission.
- `NormalRenderer`: shows surface normals mapped into [0, 1].
- `BTCRenderer`, `TTCRenderer`, `BDRenderer`: heat maps of the bounding box
  test count, the triangle test count and the BVH leaf depth, for judging
  how well the hierarchy is built.

`Renderer.render(filename, spp)` takes samples in batches of 1, 1, 2, 4, ...
up to 32 per pixel and saves the image after every batch, so the file can be
watched while it improves; the last batch may take the total past `spp`.
Renderers take an optional `seed` and `pool` (a
`pbtracer.thread_pool.ThreadPool`); without a pool they share
`default_pool()`.

### Other pieces

- `pbtracer.camera.Film` collects samples; `Film.to_ppm()` returns the
  gamma-corrected image as PPM bytes and `Film.save(path)` writes it.
- `pbtracer.thread_pool.ThreadPool` runs `parallel_for(width, height, func)`
  over a grid on worker threads; it is a context manager.
- `pbtracer.logger.init_logger()` sends progress, BVH statistics and other
  messages to the console; `pbtracer.profile.Profile(name)` is a context
  manager that logs how long its block took.

## What it does not do

pbtracer has no window or image viewer and writes no format other than PPM.
OBJ material libraries (`mtllib`, `usemtl`) and texture coordinates are
ignored; materials are set per shape in the scene.