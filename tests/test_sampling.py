import numpy as np
import pytest
from whitted_renders import constants
from whitted_renders.sampling import SAMPLERS, MitchellSampling, RandomSource, SampleSet
from whitted_renders.utils import nearest_neighbor_distances


class CancellingSource(RandomSource):
    """Random source that requests a stop after a number of draws."""

    def __init__(self, seed, cancel_after):
        super().__init__(seed)
        self.sampler = None
        self.cancel_after = cancel_after
        self.draws = 0

    def uniform_number(self):
        self.draws += 1
        if self.draws == self.cancel_after:
            self.sampler.cancel()
        return super().uniform_number()


def generate(count, param=None, seed=12):
    sampler = MitchellSampling(RandomSource(seed))
    sample_set = SampleSet()
    actual = sampler.generate_sample_set(sample_set, count, param)
    return sampler, sample_set, actual


class TestParameters:
    """Test the k/toroid parameter parser."""

    @pytest.mark.parametrize("param, expected", [
        (None, (5, True)),
        ("", (5, True)),
        ("k=3", (3, True)),
        ("k = 8 ; toroid = false", (8, False)),
        ("toroid=yes", (5, True)),
        ("toroid=0", (5, False)),
        ("k=0", (1, True)),
        ("k=-4", (1, True)),
        ("k=abc", (5, True)),
        ("K=9", (5, True)),
        ("k=2,unknown=1", (2, True)),
    ])
    def test_parse_params(self, param, expected):
        assert MitchellSampling.parse_params(param) == expected


class TestMitchellSampling:
    """Test the uniform best-candidate generator."""

    def test_zero_count(self):
        sampler, sample_set, actual = generate(0)
        assert actual == 0
        assert len(sample_set) == 0
        assert sampler.candidate_evaluations == 0

    def test_first_sample_is_origin(self):
        """The first sample is never compared against anything."""
        sampler, sample_set, actual = generate(1)
        assert actual == 1
        assert sample_set.samples == [(0.0, 0.0)]
        assert sampler.candidate_evaluations == 0

    def test_candidate_budget(self):
        """Sample i evaluates i * k candidates."""
        sampler, _, actual = generate(10, "k=3")
        assert actual == 10
        assert sampler.candidate_evaluations == 3 * sum(range(10))

    def test_samples_in_unit_square(self):
        _, sample_set, actual = generate(40)
        points = sample_set.as_array()
        assert points.shape == (40, 2)
        assert np.all(points >= 0.0) and np.all(points < 1.0)

    def test_reproducible(self):
        _, a, _ = generate(30, "k=4", seed=7)
        _, b, _ = generate(30, "k=4", seed=7)
        _, c, _ = generate(30, "k=4", seed=8)
        assert a.samples == b.samples
        assert a.samples != c.samples

    def test_sample_set_is_cleared(self):
        sampler = MitchellSampling(RandomSource(3))
        sample_set = SampleSet()
        sample_set.samples.extend([(0.9, 0.9)] * 50)

        actual = sampler.generate_sample_set(sample_set, 5)
        assert actual == len(sample_set) == 5

    def test_better_spread_than_random(self):
        """Best-candidate sets keep neighbours farther apart than white noise."""
        _, sample_set, _ = generate(64, "k=5")
        random_points = np.random.default_rng(12).random((64, 2))

        mitchell_nn = nearest_neighbor_distances(sample_set.as_array(), toroid=True)
        random_nn = nearest_neighbor_distances(random_points, toroid=True)

        assert mitchell_nn.mean() > 1.2 * random_nn.mean()

    def test_second_sample_moves_away_from_origin(self):
        _, plain, _ = generate(2, "k=50,toroid=false")
        x, y = plain.samples[1]
        assert x * x + y * y > 1.0

    def test_toroid_flag_changes_selection(self):
        """Same candidate stream, different distance metric."""
        _, plain, _ = generate(32, "k=5,toroid=false")
        _, wrapped, _ = generate(32, "k=5,toroid=true")
        assert plain.samples[0] == wrapped.samples[0]
        assert plain.samples != wrapped.samples

    def test_toroid_keeps_separation_across_edges(self):
        """Without wrap-around, samples pile up on opposite edges and crowd each other on the torus."""
        _, plain, _ = generate(100, "k=5,toroid=false")
        _, wrapped, _ = generate(100, "k=5,toroid=true")

        plain_nn = nearest_neighbor_distances(plain.as_array()[1:], toroid=True)
        wrapped_nn = nearest_neighbor_distances(wrapped.as_array()[1:], toroid=True)

        assert wrapped_nn.mean() > plain_nn.mean()

    def test_registered_by_name(self):
        assert SAMPLERS["mitchell"] is MitchellSampling


class TestCancellation:
    """Test cooperative cancellation."""

    def test_cancel_before_start(self):
        sampler = MitchellSampling(RandomSource(12))
        sampler.cancel()
        sample_set = SampleSet()

        assert sampler.generate_sample_set(sample_set, 100) == 1
        assert sampler.user_break

    def test_cancel_mid_run_stops_at_poll(self):
        """A stop request is honoured at the next 16-sample boundary."""
        rnd = CancellingSource(12, cancel_after=300)
        sampler = MitchellSampling(rnd)
        rnd.sampler = sampler
        sample_set = SampleSet()

        actual = sampler.generate_sample_set(sample_set, 200, "k=2")

        assert actual < 200
        assert actual % (constants.BREAK_CHECK_MASK + 1) == 1

        _, full, _ = generate(200, "k=2")
        assert sample_set.samples == full.samples[:actual]

    def test_progress_reported_at_poll(self):
        calls = []
        sampler = MitchellSampling(RandomSource(12), progress=lambda done, total: calls.append((done, total)))

        sampler.generate_sample_set(SampleSet(), 40, "k=2")
        assert calls == [(1, 40), (17, 40), (33, 40)]

    def test_resume(self):
        sampler = MitchellSampling(RandomSource(12))
        sampler.cancel()
        sampler.resume()
        assert not sampler.user_break
        assert sampler.generate_sample_set(SampleSet(), 20) == 20


if __name__ == "__main__":
    pytest.main([__file__])
