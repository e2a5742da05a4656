"""
Pytest fixtures and configuration for the Whitted renderer tests.

This module provides small synthetic scenes and shared assertion helpers so the
individual test modules stay focused on one behaviour each.
"""

import numpy as np
import pytest
from whitted_renders.intersections import Plane, SolidGroup, Sphere
from whitted_renders.materials import Material, PhongModel
from whitted_renders.sampling import RandomSource
from whitted_renders.scene import PinholeCamera, Scene

BACKGROUND = np.array([0.1, 0.2, 0.3])


class CountingAccessor:
    """Wraps a scene accessor and counts intersect() calls."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = 0

    def intersect(self, origin, direction):
        self.calls += 1
        return self.inner.intersect(origin, direction)


def make_camera(width=8, height=6):
    """Camera at the origin looking down -Z."""
    return PinholeCamera([0.0, 0.0, 0.0], [0.0, 0.0, -1.0], width=width, height=height, fov=40.0)


@pytest.fixture
def phong():
    return PhongModel()


@pytest.fixture
def matte_material():
    """Diffuse-only, opaque material."""
    return Material(color=np.array([0.8, 0.4, 0.2]), ka=0.1, kd=0.5, ks=0.0, h=10.0, kt=0.0)


@pytest.fixture
def empty_scene():
    """Scene without geometry: every ray misses."""
    return Scene(SolidGroup(), BACKGROUND.copy(), sources=None, camera=make_camera())


@pytest.fixture
def sphere_scene(matte_material, phong):
    """One matte unit sphere at (0, 0, -5), no lights."""
    solids = SolidGroup([Sphere([0.0, 0.0, -5.0], 1.0, matte_material, phong)])
    return Scene(solids, BACKGROUND.copy(), sources=None, camera=make_camera())


@pytest.fixture
def mirror_hall(phong):
    """
    Two parallel perfect mirrors at z = -1 and z = +1 facing each other.

    A ray along -Z from the origin bounces between them forever.
    """
    mirror = Material(color=np.array([0.5, 0.5, 0.5]), ka=0.0, kd=0.0, ks=1.0, h=10.0, kt=0.0)
    solids = SolidGroup([
        Plane([0.0, 0.0, -1.0], [0.0, 0.0, 1.0], mirror, phong),
        Plane([0.0, 0.0, 1.0], [0.0, 0.0, -1.0], mirror, phong),
    ])
    return Scene(solids, BACKGROUND.copy(), sources=None, camera=make_camera())


@pytest.fixture
def rnd():
    """Seeded random source."""
    return RandomSource(12)


def assert_color_close(actual, expected, rtol=1e-9, atol=1e-12, err_msg=""):
    """Assert that two colors are close, with helpful error messages."""
    np.testing.assert_allclose(
        actual, expected, rtol=rtol, atol=atol,
        err_msg=f"Color mismatch: {err_msg}"
    )
