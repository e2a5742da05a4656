"""
Recursive Whitted-style ray-tracing integrator.

Each sample returns a per-band color and a path signature (hash) built from
the solids, textures and light sources touched along the ray tree. Equal
signatures at neighbouring samples let the renderer skip supersampling.
"""
import numpy as np
from whitted_renders import constants
from whitted_renders.intersections import first_intersection
from whitted_renders.rendering import PathRecorder, RayStatistics, ReflectionComponent
from whitted_renders.sampling import MitchellSampling, RandomSource, SampleSet
from whitted_renders.utils import is_zero, normalize, specular_reflection, specular_refraction


class RayTracing:
    """
    Ray-tracing integrator with reflected, refracted and shadow rays.

    Recursion is stopped by a hybrid method: the depth `level` is bounded by
    max_level and the accumulated `importance` must stay above min_importance.
    """

    def __init__(self, scene, max_level=None, min_importance=None,
                 do_reflections=True, do_refractions=True, do_shadows=True,
                 recorder=None, statistics=None):
        """
        Args:
            scene: Scene accessor (intersect, background_color, sources, camera)
            max_level: Maximal recursion depth
            min_importance: Minimal importance of a secondary ray
            do_reflections: Shoot reflected secondary rays
            do_refractions: Shoot refracted secondary rays
            do_shadows: Test light visibility with shadow rays
            recorder: Optional PathRecorder for diagnostic ray segments
            statistics: Optional RayStatistics shared with the caller
        """
        self.scene = scene
        self.max_level = max_level if max_level is not None else constants.DEFAULT_MAX_LEVEL
        self.min_importance = min_importance if min_importance is not None else constants.DEFAULT_MIN_IMPORTANCE
        self.do_reflections = do_reflections
        self.do_refractions = do_refractions
        self.do_shadows = do_shadows
        self.recorder = recorder if recorder is not None else PathRecorder()
        self.statistics = statistics if statistics is not None else RayStatistics()
        self.supersampled_pixels = 0

    def compute_sample(self, x, y):
        """
        Compute one image sample.

        Args:
            x: Horizontal pixel coordinate (continuous)
            y: Vertical pixel coordinate (continuous)

        Returns:
            tuple: (color, hash) where color is a (bands,) array
        """
        camera = self.scene.camera
        ray = camera.get_ray(x, y) if camera is not None else None
        if ray is None:
            return self.scene.background_color.copy(), constants.HASH_NO_RAY

        origin, direction = ray
        return self.shade(0, 1.0, origin, direction)

    def shade(self, level, importance, origin, direction):
        """
        Color contribution of the ray shot from `origin` along `direction`.

        Args:
            level: Current recursion depth
            importance: Importance of the current ray
            origin: (3,) ray origin
            direction: (3,) ray direction (need not be normalized)

        Returns:
            tuple: (color, hash) - (bands,) array and the ray sub-signature
        """
        scene = self.scene
        bands = scene.bands
        origin = np.asarray(origin, dtype=float)
        direction = np.asarray(direction, dtype=float)

        intersections = scene.intersect(origin, direction)
        self.statistics.record_ray(level)

        i = first_intersection(intersections)
        if i is None:
            # no intersection -> background color
            self.recorder.register_ray(level, origin, origin + constants.MISS_RAY_LENGTH * direction)
            return scene.background_color.copy(), constants.HASH_MISS

        i.complete()
        self.recorder.register_ray(level, origin, i.coord_world)

        hash_value = id(i.solid) & constants.HASH_MASK

        # textures first, they may change the surface color
        if i.textures:
            for tex in i.textures:
                hash_value = (hash_value * constants.HASH_TEXTURE + int(tex.apply(i))) & constants.HASH_MASK

        view = normalize(-direction)

        if not scene.sources:
            # no light sources at all
            color = np.array(i.surface_color, dtype=float)
        else:
            # private material copy carrying the texture-modulated color
            i.material = i.material.clone()
            i.material.color = np.array(i.surface_color, dtype=float)
            color = np.zeros(bands)

            for source in scene.sources:
                to_light, intensity = source.get_intensity(i)
                position = getattr(source, "position", None)
                if position is not None:
                    self.recorder.register_shadow_ray(level, i.coord_world, position)

                if intensity is None:
                    continue

                if self.do_shadows and position is not None and not is_zero(to_light):
                    if self._occluded(i.coord_world, to_light):
                        continue

                reflection = i.reflectance_model.color_reflection(i, to_light, view, ReflectionComponent.ALL)
                if reflection is not None:
                    color += intensity * reflection
                    hash_value = (hash_value * constants.HASH_LIGHT + id(source)) & constants.HASH_MASK

        # recursion depth
        if level >= self.max_level or (not self.do_reflections and not self.do_refractions):
            return color, hash_value
        level += 1

        if self.do_reflections:
            r = specular_reflection(i.normal, view)
            ks = i.reflectance_model.color_reflection(i, view, r, ReflectionComponent.SPECULAR_REFLECTION)
            if ks is not None:
                new_importance = importance * float(np.max(ks))
                if new_importance >= self.min_importance:
                    comp, sub_hash = self.shade(level, new_importance, i.coord_world, r)
                    hash_value = (hash_value + constants.HASH_REFLECT * sub_hash) & constants.HASH_MASK
                    color += ks * comp

        if self.do_refractions:
            # transmittance only, the reflectance model is not consulted
            kt = i.material.kt
            new_importance = importance * kt
            if new_importance < self.min_importance:
                return color, hash_value

            r = specular_refraction(i.normal, i.material.n, view)
            if r is None:
                # total internal reflection
                return color, hash_value

            comp, sub_hash = self.shade(level, new_importance, i.coord_world, r)
            hash_value = (hash_value + constants.HASH_REFRACT * sub_hash) & constants.HASH_MASK
            color += kt * comp

        return color, hash_value

    def _occluded(self, point, to_light):
        """Binary visibility: True if something lies between point and the light."""
        intersections = self.scene.intersect(point, to_light)
        self.statistics.record_shadow_ray()
        si = first_intersection(intersections)
        return si is not None and not si.far(1.0)

    def jitter_pattern(self, count, seed=None):
        """
        Sub-pixel sample offsets from Mitchell sampling.

        The toroidal set is shifted by half a pixel so a single sample lands
        at the pixel center.
        """
        sampler = MitchellSampling(RandomSource(seed))
        sample_set = SampleSet()
        sampler.generate_sample_set(sample_set, count, constants.SUPERSAMPLING_PARAMS)
        return (sample_set.as_array() + 0.5) % 1.0

    def render(self, supersampling=None, adaptive=True, seed=None):
        """
        Render the camera image with adaptive supersampling.

        Pixel corners are traced first; a pixel whose four corner signatures
        agree is the mean of its corners, any other pixel is supersampled at
        Mitchell jitter positions.

        Args:
            supersampling: Samples per supersampled pixel
            adaptive: Only supersample pixels with differing corner signatures
            seed: Seed of the jitter pattern

        Returns:
            (height, width, bands) float array
        """
        camera = self.scene.camera
        width, height = camera.width, camera.height
        bands = self.scene.bands
        supersampling = supersampling if supersampling is not None else constants.DEFAULT_SUPERSAMPLING

        corners = np.zeros((height + 1, width + 1, bands))
        hashes = np.zeros((height + 1, width + 1), dtype=np.uint64)
        if adaptive:
            for y in range(height + 1):
                for x in range(width + 1):
                    color, hash_value = self.compute_sample(x, y)
                    corners[y, x] = color
                    hashes[y, x] = hash_value

        jitter = self.jitter_pattern(supersampling, seed)
        image = np.zeros((height, width, bands))
        self.supersampled_pixels = 0

        for y in range(height):
            for x in range(width):
                h = hashes[y:y + 2, x:x + 2]
                if adaptive and np.all(h == h[0, 0]):
                    image[y, x] = corners[y:y + 2, x:x + 2].mean(axis=(0, 1))
                    continue

                acc = np.zeros(bands)
                for jx, jy in jitter:
                    color, _ = self.compute_sample(x + jx, y + jy)
                    acc += color
                image[y, x] = acc / len(jitter)
                self.supersampled_pixels += 1

        return image


def to_rgb8(image):
    """
    Convert a (H, W, bands) float image to (H, W, 3) uint8 RGB.

    Images with other than three bands are reduced to their first, middle and
    last band.
    """
    image = np.asarray(image, dtype=float)
    bands = image.shape[2]
    if bands != 3:
        idx = np.round(np.linspace(0, bands - 1, 3)).astype(int)
        image = image[:, :, idx]
    return (np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)
