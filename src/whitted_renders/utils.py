"""
Utility functions for the Whitted renderer.

This module provides vector helpers shared by the integrator and the reference
scene collaborators, the key=value parameter parser used by the samplers, and
nearest-neighbour analysis for generated sample sets.
"""

import numpy as np


def normalize(v):
    """
    Return a unit-length copy of a vector.

    Zero vectors are returned unchanged (as a float copy).
    """
    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if norm < 1e-300:
        return v.copy()
    return v / norm


def is_zero(v):
    """True if every component of the vector is exactly zero."""
    return not np.any(v)


def specular_reflection(normal, view):
    """
    Mirror the view vector about the surface normal.

    Args:
        normal: Unit surface normal
        view: Unit vector pointing from the surface towards the viewer

    Returns:
        Unit reflected direction pointing away from the surface
    """
    return 2.0 * np.dot(normal, view) * normal - view


def specular_refraction(normal, n, view):
    """
    Refract the view vector through a surface with relative index n.

    The side of the surface is decided by the sign of normal . view; a ray
    leaving the solid uses the inverse ratio.

    Args:
        normal: Unit outward surface normal
        n: Refractive index of the solid (relative to the outside medium)
        view: Unit vector pointing from the surface towards the viewer

    Returns:
        Unit refracted direction, or None on total internal reflection
    """
    cos_i = np.dot(normal, view)
    if cos_i < 0.0:
        # leaving the solid
        normal = -normal
        cos_i = -cos_i
        eta = n
    else:
        eta = 1.0 / n

    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    if sin2_t > 1.0:
        return None

    cos_t = np.sqrt(1.0 - sin2_t)
    return normalize(-eta * view + (eta * cos_i - cos_t) * normal)


def parse_key_value_list(text, separators=",;"):
    """
    Parse a flat "key=value" list into a dictionary.

    Pairs are separated by any character in `separators`, whitespace around
    keys and values is dropped and keys keep their case. A bare key maps to
    an empty string; later duplicates win.

    Args:
        text: Parameter text, e.g. "k=3,toroid=false"
        separators: Characters that delimit pairs

    Returns:
        dict of str -> str
    """
    result = {}
    if not text:
        return result

    for sep in separators[1:]:
        text = text.replace(sep, separators[0])

    for item in text.split(separators[0]):
        item = item.strip()
        if not item:
            continue
        key, _, value = item.partition("=")
        key = key.strip()
        if key:
            result[key] = value.strip()
    return result


def positive(token):
    """Interpret a boolean-like token ("true", "yes", "1", ...)."""
    if token is None:
        return False
    return token.strip().lower() in ("1", "t", "true", "y", "yes", "on", "+")


def parse_int(token, default):
    """Parse an integer token, falling back to `default` when malformed."""
    try:
        return int(token.strip())
    except (AttributeError, ValueError):
        return default


def nearest_neighbor_distances(points, toroid=False):
    """
    Distance from every point to its nearest neighbour.

    Args:
        points: (N, 2) array of positions in the unit square
        toroid: Measure distances with wrap-around at the square's edges

    Returns:
        (N,) array of distances (inf for a single point)
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"points must be (N,2) array, got shape {points.shape}")

    n = points.shape[0]
    if n == 0:
        return np.zeros(0)

    delta = np.abs(points[:, None, :] - points[None, :, :])  # (N, N, 2)
    if toroid:
        delta = np.minimum(delta, 1.0 - delta)
    dist = np.sqrt(np.sum(delta**2, axis=2))
    dist[np.arange(n), np.arange(n)] = np.inf
    return np.min(dist, axis=1)
