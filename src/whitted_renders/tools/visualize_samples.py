import os
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from whitted_renders.sampling import MitchellDensitySampling, MitchellSampling, RandomSource, SampleSet, UniformDensity
from whitted_renders.utils import nearest_neighbor_distances


def plot_sample_set(sample_set, filename, title="Sample set", toroid=True):
    """
    Scatter plot of a sample set next to its nearest-neighbour histogram.
    """
    points = sample_set.as_array()

    fig = plt.figure(figsize=(12, 6))
    ax1 = fig.add_subplot(1, 2, 1)  # Samples
    ax2 = fig.add_subplot(1, 2, 2)  # Histogram

    ax1.set_title(f"{title}: {len(points)} samples")
    ax1.set_aspect('equal')
    ax1.set_xlim(0.0, 1.0)
    ax1.set_ylim(1.0, 0.0)  # y grows downwards like image rows
    ax1.scatter(points[:, 0], points[:, 1], s=4, color='black')

    if len(points) > 1:
        nn = nearest_neighbor_distances(points, toroid=toroid)
        ax2.hist(nn, bins=40, color='steelblue')
        ax2.axvline(nn.mean(), color='red', linestyle='--', label=f"mean {nn.mean():.4f}")
        ax2.legend()
    ax2.set_title("Nearest-neighbour distance" + (" (toroidal)" if toroid else ""))
    ax2.set_xlabel("distance")

    fig.savefig(filename, dpi=100)
    plt.close(fig)


def compare_samplers(count=256, param="k=6", seed=12, filename="output/mitchell_comparison.png"):
    """
    Nearest-neighbour histograms of the uniform and the density sampler
    (uniform density) for the same random stream.
    """
    sets = {}
    for name, cls in (("mitchell", MitchellSampling), ("mitchell-density", MitchellDensitySampling)):
        sampler = cls(RandomSource(seed), UniformDensity())
        sample_set = SampleSet()
        sampler.generate_sample_set(sample_set, count, param)
        sets[name] = nearest_neighbor_distances(sample_set.as_array(), toroid=True)

    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)
    fig, ax = plt.subplots(figsize=(8, 5))
    bins = np.linspace(0.0, max(d.max() for d in sets.values()), 40)
    for name, nn in sets.items():
        ax.hist(nn, bins=bins, alpha=0.5, label=f"{name} (mean {nn.mean():.4f})")
    ax.set_title(f"Nearest-neighbour distance, {count} samples, {param}")
    ax.legend()
    fig.savefig(filename, dpi=100)
    plt.close(fig)
    print(f"Saved {filename}")


if __name__ == "__main__":
    compare_samplers()
