"""
Best-candidate ("Mitchell") sample generation in the unit square.

Samples are placed one at a time by dart throwing: for sample i the generator
draws i * k random candidates and keeps the one farthest from the samples
already placed. The density-weighted variant draws candidates from a density
provider and scores them by squared distance times local density.
"""
import sys
import threading
import numpy as np
from whitted_renders import constants
from whitted_renders.utils import parse_int, parse_key_value_list, positive


class RandomSource:
    """
    Uniform [0, 1) deviates backed by numpy's default generator.

    A fixed seed gives a reproducible stream.
    """

    def __init__(self, seed=None):
        self.seed = seed if seed is not None else constants.DEFAULT_SEED
        self._rng = np.random.default_rng(self.seed)

    def uniform_number(self):
        return float(self._rng.random())

    def reset(self, seed=None):
        """Restart the stream (optionally with a new seed)."""
        if seed is not None:
            self.seed = seed
        self._rng = np.random.default_rng(self.seed)


class SampleSet:
    """
    Ordered list of (x, y) samples, filled in place by a generator.
    """

    def __init__(self):
        self.samples = []

    def __len__(self):
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)

    def as_array(self):
        """Samples as an (N, 2) float array."""
        return np.array(self.samples, dtype=float).reshape(-1, 2)


class UniformDensity:
    """Constant density over the unit square (pdf == 1)."""

    def get_sample(self, uniform, rnd):
        return uniform, rnd.uniform_number()

    def pdf(self, x, y):
        return 1.0


class ImageDensity:
    """
    Piecewise-constant density given by a 2-D weight map.

    Row 0 of the map covers y in [0, 1/H), column 0 covers x in [0, 1/W).
    The pdf is normalized to a mean of 1 over the unit square.
    """

    def __init__(self, weights):
        weights = np.asarray(weights, dtype=float)
        if weights.ndim != 2:
            raise ValueError(f"weights must be 2D array, got shape {weights.shape}")
        if np.any(weights < 0.0) or not np.all(np.isfinite(weights)):
            raise ValueError("weights must be finite and non-negative")
        total = weights.sum()
        if total <= 0.0:
            raise ValueError("weights must not be all zero")

        self.height, self.width = weights.shape
        self.density = weights / total * (self.width * self.height)

        row_sums = weights.sum(axis=1)
        self.row_cdf = np.cumsum(row_sums) / total
        with np.errstate(divide='ignore', invalid='ignore'):
            self.col_cdf = np.cumsum(weights, axis=1) / row_sums[:, None]

    @classmethod
    def from_image(cls, path, invert=False):
        """
        Density map from an image file (brightness = density).

        Args:
            path: Image file readable by Pillow
            invert: Use darkness instead of brightness
        """
        from PIL import Image
        with Image.open(path) as img:
            weights = np.asarray(img.convert("L"), dtype=float) / 255.0
        if invert:
            weights = 1.0 - weights
        return cls(weights)

    def get_sample(self, uniform, rnd):
        """
        Importance-sample one position.

        Args:
            uniform: Deviate selecting the row
            rnd: RandomSource for the column and the in-cell jitter

        Returns:
            tuple: (x, y)
        """
        row = int(np.searchsorted(self.row_cdf, uniform, side='right'))
        row = min(row, self.height - 1)
        col = int(np.searchsorted(self.col_cdf[row], rnd.uniform_number(), side='right'))
        col = min(col, self.width - 1)
        x = (col + rnd.uniform_number()) / self.width
        y = (row + rnd.uniform_number()) / self.height
        return x, y

    def pdf(self, x, y):
        col = min(max(int(x * self.width), 0), self.width - 1)
        row = min(max(int(y * self.height), 0), self.height - 1)
        return float(self.density[row, col])


class DefaultSampling:
    """
    Shared state of the sample generators.

    Attributes:
        rnd: RandomSource used for all draws
        density: Optional density provider (get_sample/pdf)
        progress: Optional callable(done, count), called every 16 samples
        candidate_evaluations: Candidates compared against the sample set
            during the last generate_sample_set() call
    """

    name = "default"

    def __init__(self, rnd=None, density=None, progress=None):
        self.rnd = rnd if rnd is not None else RandomSource()
        self.density = density
        self.progress = progress
        self.candidate_evaluations = 0
        self._user_break = threading.Event()

    def cancel(self):
        """Request a cooperative stop; polled every 16 samples."""
        self._user_break.set()

    def resume(self):
        self._user_break.clear()

    @property
    def user_break(self):
        return self._user_break.is_set()

    @staticmethod
    def parse_params(param):
        """
        Read the candidate multiplier `k` and the `toroid` flag.

        Returns:
            tuple: (k, toroid)
        """
        k = constants.DEFAULT_CANDIDATES
        toroid = True
        if param is not None:
            p = parse_key_value_list(param)

            # k = <candidates per already placed sample>
            if "k" in p:
                k = parse_int(p.pop("k"), constants.DEFAULT_CANDIDATES)
            if k < 1:
                k = 1

            # toroid = {true|false}
            if "toroid" in p:
                toroid = positive(p.pop("toroid"))
        return k, toroid


class MitchellSampling(DefaultSampling):
    """
    Mitchell sampling by dart throwing with uniform candidates.
    """

    name = "mitchell"

    def generate_sample_set(self, sample_set, count, param=None):
        """
        Generate `count` samples in the [0,1]x[0,1] domain.

        Args:
            sample_set: SampleSet, cleared and refilled in place
            count: Desired number of samples
            param: Optional textual parameter set ("k=6,toroid=false")

        Returns:
            Actual number of generated samples
        """
        k, toroid = self.parse_params(param)
        rnd = self.rnd
        samples = sample_set.samples
        samples.clear()
        self.candidate_evaluations = 0

        for i in range(count):
            best_x = 0.0
            best_y = 0.0    # best candidate so far
            best_dd = 0.0   # its squared distance to the sample set

            candidates = i * k
            while True:
                x = rnd.uniform_number()
                y = rnd.uniform_number()

                dd = 4.0    # squared distance to the set (decreases)
                d = 2.0

                if i == 0:
                    break
                self.candidate_evaluations += 1

                check_x = toroid and (x < d or x > 1.0 - d)
                check_y = toroid and (y < d or y > 1.0 - d)

                for sx, sy in samples:
                    dirty = False   # d, check_x and check_y need refresh

                    ddx = (x - sx) * (x - sx)
                    ddy = (y - sy) * (y - sy)

                    if ddx + ddy < dd:
                        dd = ddx + ddy
                        dirty = True

                    if check_x:
                        wx = (x - 1.0 - sx) * (x - 1.0 - sx)
                        if wx + ddy < dd:
                            dd = wx + ddy
                            dirty = True
                        wx = (x + 1.0 - sx) * (x + 1.0 - sx)
                        if wx + ddy < dd:
                            dd = wx + ddy
                            dirty = True

                    if check_y:
                        wy = (y - 1.0 - sy) * (y - 1.0 - sy)
                        if ddx + wy < dd:
                            dd = ddx + wy
                            dirty = True
                        wy = (y + 1.0 - sy) * (y + 1.0 - sy)
                        if ddx + wy < dd:
                            dd = ddx + wy
                            dirty = True

                    if dd <= best_dd:
                        break

                    if dirty:
                        d = np.sqrt(dd)
                        check_x = toroid and (x < d or x > 1.0 - d)
                        check_y = toroid and (y < d or y > 1.0 - d)

                if dd > best_dd:
                    best_dd = dd
                    best_x = x
                    best_y = y

                candidates -= 1
                if candidates <= 0:
                    break

            samples.append((best_x, best_y))

            if (i & constants.BREAK_CHECK_MASK) == 0:
                if self.progress is not None:
                    self.progress(len(samples), count)
                if self.user_break:
                    break

        return len(samples)


class MitchellDensitySampling(DefaultSampling):
    """
    Density-controlled Mitchell sampling.

    Candidates come from the attached density provider; the score of a
    candidate is its squared distance to the set times the local density.
    """

    name = "mitchell-density"

    def generate_sample_set(self, sample_set, count, param=None):
        """
        Generate up to `count` density-weighted samples.

        Returns:
            Actual number of generated samples (0 without a density provider)
        """
        k, toroid = self.parse_params(param)
        rnd = self.rnd
        samples = sample_set.samples
        samples.clear()
        self.candidate_evaluations = 0

        density = self.density
        if density is None:
            return 0

        for i in range(count):
            best_x = 0.0
            best_y = 0.0    # best candidate so far
            best_dd = -1.0  # its score (squared distance * density)

            candidates = i * k
            while True:
                while True:
                    x, y = density.get_sample(rnd.uniform_number(), rnd)
                    dens = density.pdf(x, y)
                    if dens >= constants.DENSITY_FLOOR:
                        break

                dd = sys.float_info.max

                if i == 0:
                    break
                self.candidate_evaluations += 1

                for sx, sy in samples:
                    ddx = (x - sx) * (x - sx)
                    ddy = (y - sy) * (y - sy)

                    if ddx + ddy < dd:
                        dd = ddx + ddy

                    if toroid:
                        wx = (x - 1.0 - sx) * (x - 1.0 - sx)
                        dd = min(dd, wx + ddy)
                        wx = (x + 1.0 - sx) * (x + 1.0 - sx)
                        dd = min(dd, wx + ddy)

                        wy = (y - 1.0 - sy) * (y - 1.0 - sy)
                        dd = min(dd, ddx + wy)
                        wy = (y + 1.0 - sy) * (y + 1.0 - sy)
                        dd = min(dd, ddx + wy)

                    if dd * dens <= best_dd:
                        break

                if dd * dens > best_dd:
                    best_dd = dd * dens
                    best_x = x
                    best_y = y

                candidates -= 1
                if candidates <= 0:
                    break

            samples.append((best_x, best_y))

            if (i & constants.BREAK_CHECK_MASK) == 0:
                if self.progress is not None:
                    self.progress(len(samples), count)
                if self.user_break:
                    break

        return len(samples)


SAMPLERS = {
    MitchellSampling.name: MitchellSampling,
    MitchellDensitySampling.name: MitchellDensitySampling,
}
