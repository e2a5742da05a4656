"""
Scene accessor, camera and the default demo scene.
"""
from dataclasses import dataclass
import numpy as np
from whitted_renders import constants
from whitted_renders.intersections import Plane, SolidGroup, Sphere
from whitted_renders.lights import AmbientLightSource, PointLightSource
from whitted_renders.materials import CheckerTexture, Material, PhongModel
from whitted_renders.utils import normalize


class PinholeCamera:
    """
    Pinhole camera mapping continuous pixel coordinates to primary rays.

    Coordinate System:
    - Pixel (0, 0) is the top-left image corner, (width, height) the bottom-right.
    - fov is the vertical field of view in degrees.
    """

    def __init__(self, center, target, up=None, fov=None, width=None, height=None):
        self.center = np.asarray(center, dtype=float)
        self.width = width if width is not None else constants.IMAGE_WIDTH
        self.height = height if height is not None else constants.IMAGE_HEIGHT
        self.fov = fov if fov is not None else constants.CAMERA_FOV
        up = np.asarray(up if up is not None else [0.0, 1.0, 0.0], dtype=float)

        # Camera basis
        self.forward = normalize(np.asarray(target, dtype=float) - self.center)
        self.right = normalize(np.cross(self.forward, up))
        if not np.any(self.right):
            raise ValueError("up vector must not be parallel to the view direction")
        self.up = np.cross(self.right, self.forward)

        self.tan_half_fov = np.tan(np.deg2rad(self.fov / 2.0))

    def get_ray(self, x, y):
        """
        Primary ray through the continuous pixel position (x, y).

        Returns:
            (origin, direction) or None if the position lies outside the image
        """
        if not (0.0 <= x <= self.width and 0.0 <= y <= self.height):
            return None

        aspect_ratio = self.width / self.height
        px = (2.0 * x / self.width - 1.0) * aspect_ratio * self.tan_half_fov
        py = (1.0 - 2.0 * y / self.height) * self.tan_half_fov
        direction = self.forward + px * self.right + py * self.up
        return self.center.copy(), normalize(direction)


@dataclass(eq=False)
class Scene:
    """
    Scene accessor consumed by the integrator.

    Attributes:
        intersectable: Object with intersect(origin, direction) -> ordered list
        background_color: Per-band color for rays leaving the scene
        sources: Ordered light sources, or None
        camera: Object with get_ray(x, y) -> (origin, direction) | None
    """
    intersectable: object
    background_color: np.ndarray
    sources: list | None = None
    camera: object = None

    def __post_init__(self):
        self.background_color = np.asarray(self.background_color, dtype=float)
        if self.background_color.ndim != 1:
            raise ValueError(f"background_color must be 1D array, got shape {self.background_color.shape}")

    @property
    def bands(self):
        return self.background_color.shape[0]

    def intersect(self, origin, direction):
        return self.intersectable.intersect(origin, direction)


def spectrum(rgb, bands):
    """Resample an RGB triple to `bands` spectral bands."""
    rgb = np.asarray(rgb, dtype=float)
    if bands == 3:
        return rgb.copy()
    return np.interp(np.linspace(0.0, 2.0, bands), [0.0, 1.0, 2.0], rgb)


def create_default_scene(bands=None, width=None, height=None):
    """
    Demo scene: mirror sphere, glass sphere, checkered floor, point + ambient light.
    """
    bands = bands if bands is not None else constants.DEFAULT_BANDS
    phong = PhongModel()

    floor_material = Material(color=spectrum([0.9, 0.9, 0.85], bands), ka=0.2, kd=0.7, ks=0.1, h=5.0)
    mirror_material = Material(color=spectrum([0.6, 0.6, 0.7], bands), ka=0.1, kd=0.1, ks=0.8, h=80.0)
    glass_material = Material(color=spectrum([0.9, 1.0, 0.9], bands), ka=0.05, kd=0.05, ks=0.1, h=120.0,
                              kt=0.8, n=1.5)

    solids = SolidGroup()
    solids.add(Plane([0.0, -1.0, 0.0], [0.0, 1.0, 0.0], floor_material, phong,
                     textures=[CheckerTexture(1.0, spectrum([0.2, 0.2, 0.6], bands))]))
    solids.add(Sphere([-1.1, 0.0, -4.5], 1.0, mirror_material, phong))
    solids.add(Sphere([1.0, 0.0, -3.2], 0.9, glass_material, phong))

    sources = [
        PointLightSource([-3.0, 5.0, 0.0], spectrum([1.0, 1.0, 1.0], bands)),
        AmbientLightSource(spectrum([0.3, 0.3, 0.3], bands)),
    ]

    camera = PinholeCamera([0.0, 0.6, 2.0], [0.0, 0.0, -4.0], width=width, height=height)
    return Scene(solids, spectrum(constants.BACKGROUND_COLOR, bands), sources, camera)
