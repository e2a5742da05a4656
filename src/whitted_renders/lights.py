"""
Light sources for the Whitted renderer.

A light source answers get_intensity(intersection) with a direction towards
the light and a per-band intensity (or None for no contribution). Sources with
a world-space `position` are subject to shadow rays; directional and ambient
sources have `position = None` and are exempt.
"""
import numpy as np
from whitted_renders.utils import normalize


class PointLightSource:
    """
    Point light at a world position.

    The returned direction is the full vector from the hit point to the light,
    so a shadow-ray occluder at parametric distance < 1 lies before the light.
    """

    def __init__(self, position, intensity):
        self.position = np.asarray(position, dtype=float)
        self.intensity = np.asarray(intensity, dtype=float)

    def get_intensity(self, intersection):
        return self.position - intersection.coord_world, self.intensity.copy()


class DirectionalLightSource:
    """Light arriving from infinity along `direction` (direction of travel)."""

    position = None

    def __init__(self, direction, intensity):
        self.direction = normalize(direction)
        self.intensity = np.asarray(intensity, dtype=float)

    def get_intensity(self, intersection):
        return -self.direction, self.intensity.copy()


class AmbientLightSource:
    """Ambient term: zero direction, evaluated by the reflectance model's ambient part."""

    position = None

    def __init__(self, intensity):
        self.intensity = np.asarray(intensity, dtype=float)

    def get_intensity(self, intersection):
        return np.zeros(3), self.intensity.copy()
