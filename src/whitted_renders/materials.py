"""
Reference materials, reflectance model and textures.

The integrator treats all of these as capabilities: a material is cloneable and
exposes color, kt and n; a reflectance model evaluates per-band reflection for
a pair of directions; a texture returns an integer contribution to the path
signature and may modify the surface color.
"""
from dataclasses import dataclass, field, replace
import numpy as np
from whitted_renders.rendering import ReflectionComponent
from whitted_renders.utils import is_zero, normalize


@dataclass(eq=False)
class Material:
    """
    Phong material parameters.

    Attributes:
        color: Per-band base color
        ka: Ambient coefficient
        kd: Diffuse coefficient
        ks: Specular (mirror) coefficient
        h: Phong highlight exponent
        kt: Transmittance coefficient
        n: Refractive index relative to the outside medium
    """
    color: np.ndarray = field(default_factory=lambda: np.ones(3))
    ka: float = 0.1
    kd: float = 0.6
    ks: float = 0.3
    h: float = 20.0
    kt: float = 0.0
    n: float = 1.5

    def __post_init__(self):
        self.color = np.asarray(self.color, dtype=float)
        if self.color.ndim != 1:
            raise ValueError(f"color must be 1D array, got shape {self.color.shape}")

    def clone(self):
        """Independent copy, safe to mutate per shading call."""
        return replace(self, color=self.color.copy())


class PhongModel:
    """
    Phong reflectance model.

    All directions are expected to point away from the surface.
    """

    def color_reflection(self, intersection, input_dir, output_dir, component=ReflectionComponent.ALL):
        """
        Per-band reflection between an incoming and an outgoing direction.

        Args:
            intersection: Completed Intersection (normal, material)
            input_dir: Direction towards the light (zero vector for ambient light)
            output_dir: Direction towards the viewer
            component: Which part of the model to evaluate

        Returns:
            (bands,) array, or None when the component contributes nothing
        """
        material = intersection.material
        color = np.asarray(material.color, dtype=float)

        if is_zero(input_dir):
            if component in (ReflectionComponent.ALL, ReflectionComponent.AMBIENT):
                return material.ka * color
            return None

        normal = intersection.normal
        L = normalize(input_dir)
        V = normalize(output_dir)
        cos_l = np.dot(normal, L)
        cos_v = np.dot(normal, V)

        # light and viewer on opposite sides
        if cos_l * cos_v <= 0.0:
            return None
        if cos_v < 0.0:
            normal = -normal
            cos_l = -cos_l

        if component == ReflectionComponent.SPECULAR_REFLECTION:
            if material.ks <= 0.0:
                return None
            return np.full(color.shape, material.ks)

        if component == ReflectionComponent.AMBIENT:
            return None

        result = material.kd * cos_l * color
        if component == ReflectionComponent.DIFFUSE:
            return result

        R = 2.0 * cos_l * normal - L
        cos_r = np.dot(R, V)
        if cos_r > 0.0 and material.ks > 0.0:
            result = result + material.ks * cos_r**material.h
        return result


class CheckerTexture:
    """
    3-D checkerboard: odd cells get `color`, even cells keep the material color.

    apply() returns the cell parity, so neighbouring samples on different
    cells get different path signatures.
    """

    def __init__(self, size, color):
        self.size = float(size)
        self.color = np.asarray(color, dtype=float)
        if self.size <= 0.0:
            raise ValueError(f"size must be positive, got {size}")

    def apply(self, intersection):
        cells = np.floor(intersection.coord_world / self.size).astype(int)
        parity = int(np.sum(cells)) & 1
        if parity:
            intersection.surface_color = self.color.copy()
        return parity
