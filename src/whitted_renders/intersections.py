"""
Ray-geometry intersection for the reference scene.

The integrator only needs a scene accessor that returns an ordered list of
Intersection candidates; the solids here are the minimal collaborators used by
the demo scene, the CLI and the tests.
"""
import numpy as np
from whitted_renders import constants
from whitted_renders.rendering import Intersection


def solve_quadratic(a, b, c):
    """
    Solve at^2 + bt + c = 0.

    Returns:
        tuple: (t1, t2) with t1 <= t2, or None if there is no real solution
    """
    if abs(a) <= 1e-12:
        return None
    discriminant = b**2 - 4.0 * a * c
    if discriminant < 0.0:
        return None

    sqrt_disc = np.sqrt(discriminant)
    inv_2a = 0.5 / a
    t1 = (-b - sqrt_disc) * inv_2a
    t2 = (-b + sqrt_disc) * inv_2a
    return (t1, t2) if t1 <= t2 else (t2, t1)


def first_intersection(intersections, epsilon=None):
    """
    Pick the nearest intersection in front of the ray origin.

    Args:
        intersections: Candidates ordered by increasing t (may be None)
        epsilon: Minimal accepted t, guards against self-intersection

    Returns:
        Intersection or None
    """
    eps = epsilon if epsilon is not None else constants.RAY_EPSILON
    if not intersections:
        return None
    for i in intersections:
        if i.t > eps:
            return i
    return None


class Solid:
    """
    Base class of reference solids.

    The path signature folds in id(solid), so each solid instance is a
    distinct element.
    """

    def __init__(self, material, reflectance_model, textures=None):
        self.material = material
        self.reflectance_model = reflectance_model
        self.textures = list(textures) if textures else None

    def _hit(self, t, origin, direction, enter, normal=None):
        return Intersection(
            t=t,
            coord_world=origin + t * direction,
            solid=self,
            material=self.material,
            normal=normal,
            reflectance_model=self.reflectance_model,
            textures=self.textures,
            enter=enter
        )

    def intersect(self, origin, direction):
        raise NotImplementedError

    def normal_at(self, point):
        raise NotImplementedError


class Sphere(Solid):
    """Sphere given by center and radius."""

    def __init__(self, center, radius, material, reflectance_model, textures=None):
        super().__init__(material, reflectance_model, textures)
        self.center = np.asarray(center, dtype=float)
        self.radius = float(radius)
        if self.radius <= 0.0:
            raise ValueError(f"radius must be positive, got {radius}")

    def intersect(self, origin, direction):
        oc = origin - self.center
        a = np.dot(direction, direction)
        b = 2.0 * np.dot(oc, direction)
        c = np.dot(oc, oc) - self.radius**2

        roots = solve_quadratic(a, b, c)
        if roots is None:
            return []
        t1, t2 = roots
        return [self._hit(t1, origin, direction, True),
                self._hit(t2, origin, direction, False)]

    def normal_at(self, point):
        return (point - self.center) / self.radius


class Plane(Solid):
    """Infinite plane through `point` with outward `normal`."""

    def __init__(self, point, normal, material, reflectance_model, textures=None):
        super().__init__(material, reflectance_model, textures)
        self.point = np.asarray(point, dtype=float)
        normal = np.asarray(normal, dtype=float)
        self.normal = normal / np.linalg.norm(normal)

    def intersect(self, origin, direction):
        denom = np.dot(direction, self.normal)
        if abs(denom) < 1e-12:
            return []
        t = np.dot(self.point - origin, self.normal) / denom
        return [self._hit(t, origin, direction, denom < 0.0, normal=self.normal.copy())]

    def normal_at(self, point):
        return self.normal.copy()


class SolidGroup:
    """
    Scene accessor over a flat list of solids.

    intersect() merges every solid's candidates ordered by t.
    """

    def __init__(self, solids=None):
        self.solids = list(solids) if solids else []

    def add(self, solid):
        self.solids.append(solid)
        return solid

    def intersect(self, origin, direction):
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)
        result = []
        for solid in self.solids:
            result.extend(solid.intersect(origin, direction))
        result.sort(key=lambda i: i.t)
        return result
