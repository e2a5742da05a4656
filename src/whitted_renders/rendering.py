"""
Data structures and interfaces for the Whitted ray-tracing pipeline.
"""
from dataclasses import dataclass, field
from enum import Enum
import threading
import numpy as np
from whitted_renders.utils import normalize


class ReflectionComponent(Enum):
    """Selector for the part of the reflectance model to evaluate."""
    ALL = "all"
    DIFFUSE = "diffuse"
    SPECULAR_REFLECTION = "specular_reflection"
    AMBIENT = "ambient"


@dataclass
class Intersection:
    """
    Nearest-hit record produced by a scene accessor for one ray.

    Attributes:
        t: Parametric distance along the (unnormalized) ray direction
        coord_world: (3,) world coordinates of the hit point
        solid: Owning solid, its hash seeds the path signature
        material: Material capability (cloneable, exposes color/kt/n)
        normal: (3,) outward surface normal, may be filled by complete()
        reflectance_model: Evaluator with color_reflection(...)
        textures: Ordered textures applied to the hit, or None
        surface_color: Per-band surface color, filled by complete()
        enter: True if the ray enters the solid at this point
    """
    t: float
    coord_world: np.ndarray  # (3,) shape
    solid: object = None
    material: object = None
    normal: np.ndarray | None = None  # (3,) shape
    reflectance_model: object = None
    textures: list | None = None
    surface_color: np.ndarray | None = None
    enter: bool = True

    def __post_init__(self):
        """Validate vector shapes."""
        self.coord_world = np.asarray(self.coord_world, dtype=float)
        if self.coord_world.shape != (3,):
            raise ValueError(f"coord_world must be (3,) array, got shape {self.coord_world.shape}")
        if self.normal is not None:
            self.normal = np.asarray(self.normal, dtype=float)
            if self.normal.shape != (3,):
                raise ValueError(f"normal must be (3,) array, got shape {self.normal.shape}")

    def complete(self):
        """
        Finalize late-bound attributes (normal, surface color).

        Safe to call more than once.
        """
        if self.normal is None and self.solid is not None:
            self.normal = np.asarray(self.solid.normal_at(self.coord_world), dtype=float)
        if self.normal is not None:
            self.normal = normalize(self.normal)
        if self.surface_color is None and self.material is not None:
            self.surface_color = np.array(self.material.color, dtype=float)

    def far(self, limit):
        """True if the hit lies at or beyond parametric distance `limit`."""
        return self.t >= limit


@dataclass(frozen=True)
class RaySegment:
    """One diagnostic ray segment registered during shading."""
    level: int
    origin: np.ndarray
    endpoint: np.ndarray
    shadow: bool = False


class PathRecorder:
    """
    Diagnostic ray-path sink.

    The base class ignores everything, so an integrator without a real
    recorder simply calls these no-ops.
    """

    def register_ray(self, level, origin, endpoint):
        pass

    def register_shadow_ray(self, level, origin, target):
        pass

    def reset(self):
        pass


class RayPathRecorder(PathRecorder):
    """
    Records ray segments for visualization or statistics.

    Registration is append-only and guarded by a lock, so several pixel
    workers may share one recorder.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._segments = []

    def register_ray(self, level, origin, endpoint):
        segment = RaySegment(level, np.array(origin, dtype=float), np.array(endpoint, dtype=float))
        with self._lock:
            self._segments.append(segment)

    def register_shadow_ray(self, level, origin, target):
        segment = RaySegment(level, np.array(origin, dtype=float), np.array(target, dtype=float), shadow=True)
        with self._lock:
            self._segments.append(segment)

    def reset(self):
        with self._lock:
            self._segments = []

    @property
    def segments(self):
        """Snapshot of all registered segments."""
        with self._lock:
            return list(self._segments)

    @property
    def max_level(self):
        """Deepest recursion level seen so far (-1 if nothing recorded)."""
        with self._lock:
            return max((s.level for s in self._segments), default=-1)


@dataclass
class RayStatistics:
    """
    Ray counters for one render (or one sample).

    Passed explicitly to the integrator instead of living in global state.
    """
    all_rays: int = 0
    primary_rays: int = 0
    shadow_rays: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_ray(self, level):
        with self._lock:
            self.all_rays += 1
            if level == 0:
                self.primary_rays += 1

    def record_shadow_ray(self):
        with self._lock:
            self.all_rays += 1
            self.shadow_rays += 1

    def merge(self, other):
        """Accumulate counters from another (per-thread) instance."""
        with self._lock:
            self.all_rays += other.all_rays
            self.primary_rays += other.primary_rays
            self.shadow_rays += other.shadow_rays

    def reset(self):
        with self._lock:
            self.all_rays = 0
            self.primary_rays = 0
            self.shadow_rays = 0
