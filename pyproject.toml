[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pbtracer"
version = "0.1.0"
description = "A small physically based path tracer with a BVH, OBJ loading and PPM output"
requires-python = ">=3.10"
keywords = ["ray tracing", "path tracing", "rendering", "bvh", "obj", "ppm"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pbtracer = "pbtracer.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pbtracer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
