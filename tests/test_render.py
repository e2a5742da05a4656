import numpy as np
import pytest
from conftest import BACKGROUND, make_camera
from whitted_renders.core import RayTracing, to_rgb8
from whitted_renders.intersections import Plane, SolidGroup
from whitted_renders.scene import Scene, create_default_scene


def test_adaptive_render_of_empty_scene(empty_scene):
    """Uniform signatures everywhere -> no pixel is supersampled."""
    tracer = RayTracing(empty_scene)
    image = tracer.render(supersampling=4)

    assert image.shape == (6, 8, 3)
    np.testing.assert_allclose(image, np.broadcast_to(BACKGROUND, image.shape))
    assert tracer.supersampled_pixels == 0
    # only the (w + 1) x (h + 1) corner grid was traced
    assert tracer.statistics.primary_rays == 9 * 7


def test_non_adaptive_render_supersamples_everything(empty_scene):
    tracer = RayTracing(empty_scene)
    image = tracer.render(supersampling=3, adaptive=False)

    assert tracer.supersampled_pixels == 8 * 6
    assert tracer.statistics.primary_rays == 8 * 6 * 3
    np.testing.assert_allclose(image, np.broadcast_to(BACKGROUND, image.shape))


def test_edges_are_supersampled(matte_material, phong):
    """Pixels straddling a silhouette get supersampled, flat regions do not."""
    # the plane covers the lower half of the view
    floor = Plane([0.0, -0.5, 0.0], [0.0, 1.0, 0.0], matte_material, phong)
    scene = Scene(SolidGroup([floor]), BACKGROUND.copy(), sources=None, camera=make_camera(16, 12))
    tracer = RayTracing(scene)

    image = tracer.render(supersampling=4)

    assert 0 < tracer.supersampled_pixels < 16 * 12
    np.testing.assert_allclose(image[0, 0], BACKGROUND)
    np.testing.assert_allclose(image[-1, -1], matte_material.color)


def test_jitter_pattern(empty_scene):
    tracer = RayTracing(empty_scene)
    single = tracer.jitter_pattern(1)
    np.testing.assert_allclose(single, [[0.5, 0.5]])

    pattern = tracer.jitter_pattern(8, seed=3)
    assert pattern.shape == (8, 2)
    assert np.all((pattern >= 0.0) & (pattern < 1.0))
    np.testing.assert_array_equal(pattern, tracer.jitter_pattern(8, seed=3))


def test_default_scene_renders():
    scene = create_default_scene(width=12, height=9)
    tracer = RayTracing(scene)
    image = tracer.render(supersampling=2)

    assert image.shape == (9, 12, 3)
    assert np.all(np.isfinite(image))
    assert tracer.supersampled_pixels > 0
    assert tracer.statistics.shadow_rays > 0


@pytest.mark.parametrize("bands", [1, 3, 5])
def test_to_rgb8(bands):
    image = np.linspace(-0.5, 1.5, 2 * 2 * bands).reshape(2, 2, bands)
    rgb = to_rgb8(image)

    assert rgb.shape == (2, 2, 3)
    assert rgb.dtype == np.uint8
    assert rgb.min() == 0
    assert rgb.max() == 255


if __name__ == "__main__":
    pytest.main([__file__])
