import argparse
import os
import sys
import time
import numpy as np
import PIL.Image
from whitted_renders import constants
from whitted_renders.core import RayTracing, to_rgb8
from whitted_renders.rendering import RayPathRecorder, RayStatistics
from whitted_renders.sampling import SAMPLERS, ImageDensity, RandomSource, SampleSet, UniformDensity
from whitted_renders.scene import create_default_scene


def render_image(args):
    """Render the demo scene and save it as PNG."""
    print(f"\n--- Rendering {args.width}x{args.height} ---")
    scene = create_default_scene(bands=args.bands, width=args.width, height=args.height)
    statistics = RayStatistics()
    tracer = RayTracing(scene, max_level=args.max_level, min_importance=args.min_importance,
                        do_reflections=not args.no_reflections,
                        do_refractions=not args.no_refractions,
                        do_shadows=not args.no_shadows,
                        statistics=statistics)

    t0 = time.time()
    image = tracer.render(supersampling=args.supersampling, adaptive=not args.no_adaptive, seed=args.seed)
    print(f"  Complete in {time.time() - t0:.2f}s")
    print(f"  Rays: {statistics.all_rays} total, {statistics.primary_rays} primary, "
          f"{statistics.shadow_rays} shadow")
    print(f"  Supersampled pixels: {tracer.supersampled_pixels} of {args.width * args.height}")

    _ensure_dir(args.render)
    PIL.Image.fromarray(to_rgb8(image)).save(args.render)
    print(f"  Saved {args.render}")


def generate_samples(args):
    """Generate a sample set and draw it as white dots on black."""
    print(f"\n--- Generating {args.count} samples ({args.sampler}, '{args.params}') ---")
    sampler = make_sampler(args.sampler, args.seed, args.density)
    sample_set = SampleSet()

    t0 = time.time()
    sampler.progress = lambda done, total: report_progress(done, total, t0)
    actual = sampler.generate_sample_set(sample_set, args.count, args.params)
    print(f"  Complete in {time.time() - t0:.2f}s, {actual} samples, "
          f"{sampler.candidate_evaluations} candidate evaluations")

    image = np.zeros((args.res, args.res), dtype=np.uint8)
    if actual:
        pts = np.minimum((sample_set.as_array() * args.res).astype(int), args.res - 1)
        image[pts[:, 1], pts[:, 0]] = 255

    _ensure_dir(args.samples)
    PIL.Image.fromarray(image).save(args.samples)
    print(f"  Saved {args.samples}")
    return sample_set


def report_progress(done, total, t0):
    """Print a progress line every PROGRESS_INTERVAL samples."""
    if done > 1 and (done - 1) % constants.PROGRESS_INTERVAL == 0:
        print(f"  {done}/{total} samples, {time.time() - t0:.2f}s")


def make_sampler(name, seed, density_file=None):
    if name not in SAMPLERS:
        raise ValueError(f"Unknown sampler '{name}'. Valid samplers: {sorted(SAMPLERS)}")
    density = ImageDensity.from_image(density_file) if density_file else UniformDensity()
    return SAMPLERS[name](RandomSource(seed), density)


def trace_sample(args):
    """Trace a single sample and print its ray tree."""
    x, y = args.trace
    scene = create_default_scene(bands=args.bands, width=args.width, height=args.height)
    recorder = RayPathRecorder()
    statistics = RayStatistics()
    tracer = RayTracing(scene, max_level=args.max_level, min_importance=args.min_importance,
                        do_reflections=not args.no_reflections,
                        do_refractions=not args.no_refractions,
                        do_shadows=not args.no_shadows,
                        recorder=recorder, statistics=statistics)

    color, hash_value = tracer.compute_sample(x, y)
    print(f"\n--- Sample ({x}, {y}) ---")
    for segment in recorder.segments:
        kind = "shadow" if segment.shadow else "ray"
        print(f"  [{segment.level:2d}] {kind:6s} {np.round(segment.origin, 4)} -> {np.round(segment.endpoint, 4)}")
    print(f"  Color: {np.round(color, 4)}")
    print(f"  Hash: {hash_value}")
    print(f"  Rays: {statistics.all_rays} total, {statistics.shadow_rays} shadow")
    return color, hash_value


def plot_samples(args):
    from whitted_renders.tools.visualize_samples import plot_sample_set
    sampler = make_sampler(args.sampler, args.seed, args.density)
    sample_set = SampleSet()
    sampler.generate_sample_set(sample_set, args.count, args.params)
    _ensure_dir(args.plot)
    plot_sample_set(sample_set, args.plot, title=f"{args.sampler} ({args.params})")
    print(f"Saved {args.plot}")


def _ensure_dir(path):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def build_parser():
    parser = argparse.ArgumentParser(description="Whitted ray tracer and Mitchell sample generator")
    parser.add_argument("--render", metavar="PNG", help="Render the demo scene to a PNG file")
    parser.add_argument("--samples", metavar="PNG", help="Generate a sample set and save it as a PNG file")
    parser.add_argument("--plot", metavar="PNG", help="Plot a sample set with nearest-neighbour statistics")
    parser.add_argument("--trace", nargs=2, type=float, metavar=("X", "Y"), help="Trace one sample and print its rays")

    render = parser.add_argument_group("ray tracing")
    render.add_argument("--width", type=int, default=constants.IMAGE_WIDTH, help="Image width")
    render.add_argument("--height", type=int, default=constants.IMAGE_HEIGHT, help="Image height")
    render.add_argument("--bands", type=int, default=constants.DEFAULT_BANDS, help="Number of spectral bands")
    render.add_argument("--max-level", type=int, default=constants.DEFAULT_MAX_LEVEL, help="Maximal recursion depth")
    render.add_argument("--min-importance", type=float, default=constants.DEFAULT_MIN_IMPORTANCE,
                        help="Minimal importance of secondary rays")
    render.add_argument("--supersampling", type=int, default=constants.DEFAULT_SUPERSAMPLING,
                        help="Samples per supersampled pixel")
    render.add_argument("--no-adaptive", action="store_true", help="Supersample every pixel")
    render.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    render.add_argument("--no-reflections", action="store_true", help="Disable reflected rays")
    render.add_argument("--no-refractions", action="store_true", help="Disable refracted rays")

    sampling = parser.add_argument_group("sampling")
    sampling.add_argument("--sampler", default="mitchell", choices=sorted(SAMPLERS), help="Sampling method")
    sampling.add_argument("--count", type=int, default=constants.DEFAULT_SAMPLE_COUNT, help="Number of samples")
    sampling.add_argument("--seed", type=int, default=constants.DEFAULT_SEED, help="Random seed")
    sampling.add_argument("--params", default=constants.DEFAULT_SAMPLER_PARAMS, help="Sampler parameters (k=6,toroid=true)")
    sampling.add_argument("--density", metavar="IMAGE", help="Density image for mitchell-density")
    sampling.add_argument("--res", type=int, default=constants.DEFAULT_RESOLUTION, help="Sample image resolution")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.render:
        render_image(args)
    elif args.samples:
        generate_samples(args)
    elif args.plot:
        plot_samples(args)
    elif args.trace:
        trace_sample(args)
    else:
        parser.print_help()


def run_render():
    """Entry point for whitted-render command."""
    sys.argv = [sys.argv[0], "--render", "output/render.png"] + sys.argv[1:]
    main()


def run_samples():
    """Entry point for whitted-samples command."""
    sys.argv = [sys.argv[0], "--samples", "output/samples.png"] + sys.argv[1:]
    main()


if __name__ == "__main__":
    main()
