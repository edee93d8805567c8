"""A small physically based path tracer with a BVH, OBJ loading and PPM output."""

__version__ = "0.1.0"