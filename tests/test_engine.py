"""Tests for RadialBlurEngine."""

import pytest
import numpy as np
import torch

from radialblur.core import (
    BlurConfig,
    BlurPoint,
    PointSet,
    RadialBlurEngine,
    gaussian_blur,
    make_placeholder,
    render_gradient_preview,
    mask_to_image,
)


def _constant_blur(image, radius):
    return np.full_like(image, 200)


class TestRadialBlurEngine:
    @pytest.fixture
    def image(self):
        return np.full((48, 64, 3), 100, dtype=np.uint8)

    @pytest.fixture
    def engine(self):
        return RadialBlurEngine(BlurConfig(global_max=10), blur_fn=_constant_blur)

    def test_render_composite(self, engine, image):
        points = [BlurPoint(32, 24, 10, 100)]
        out, meta = engine.render(image, points)

        assert meta["status"] == "success"
        assert meta["mode"] == "composite"
        assert meta["num_points"] == 1
        assert meta["mask"].shape == (48, 64)
        assert out.shape == image.shape
        assert np.all(out[24, 32] == 200)
        assert np.all(out[0, 0] < 200)

    def test_render_point_set(self, engine, image):
        points = PointSet(64, 48, engine.cfg)
        points.add()
        out, meta = engine.render(image, points)
        assert meta["mode"] == "composite"
        assert out[24, 32, 0] == 180

    def test_point_set_global_max_shared_with_engine(self, engine, image):
        points = PointSet(64, 48, engine.cfg)
        points.set_global_max(4)
        points.add(32, 24)
        assert engine.cfg.global_max == 4
        assert points[0].intensity == 3

        _, meta = engine.render(image, points)
        assert meta["mask"][24, 32].item() == pytest.approx(0.75)

    def test_empty_points_passthrough(self, engine, image):
        out, meta = engine.render(image, [])
        assert meta["mode"] == "passthrough"
        assert np.array_equal(out, image)
        assert out is not image

    def test_empty_points_inverted_passthrough(self, image):
        engine = RadialBlurEngine(BlurConfig(invert=True), blur_fn=_constant_blur)
        out, meta = engine.render(image, [])
        assert np.array_equal(out, image)
        assert torch.all(meta["mask"] == 1.0)

    def test_inverted_render(self, image):
        engine = RadialBlurEngine(BlurConfig(global_max=10, invert=True), blur_fn=_constant_blur)
        out, meta = engine.render(image, [BlurPoint(32, 24, 10, 50)])
        assert meta["status"] == "success"
        # Sharp at the point, fully blurred far away
        assert np.all(out[24, 32] == 100)
        assert np.all(out[0, 0] == 200)

    def test_precomputed_blurred(self, engine, image):
        blurred = np.full_like(image, 0)
        out, _ = engine.render(image, [BlurPoint(32, 24, 10, 100)], blurred=blurred)
        assert np.all(out[24, 32] == 0)

    def test_blur_fn_receives_global_max(self, image):
        seen = []

        def blur_fn(img, radius):
            seen.append(radius)
            return img.copy()

        RadialBlurEngine(BlurConfig(global_max=17), blur_fn=blur_fn).render(image, [BlurPoint(1, 1, 5, 100)])
        assert seen == [17]

    def test_mismatched_blurred_falls_back(self, engine, image):
        out, meta = engine.render(image, [BlurPoint(1, 1, 5, 100)], blurred=np.zeros((3, 3, 3), dtype=np.uint8))
        assert meta["status"] == "error"
        assert np.array_equal(out, image)

    def test_gradient_mode(self, image):
        cfg = BlurConfig(show_gradient_map=True, gradient_opacity=0.5)
        engine = RadialBlurEngine(cfg, blur_fn=_constant_blur)
        out, meta = engine.render(image, [BlurPoint(32, 24, 10, 100)])
        assert meta["mode"] == "gradient"
        assert out.shape == (48, 64, 4)
        assert out.dtype == np.uint8

    def test_snapshot_isolated_from_later_edits(self, engine, image):
        points = PointSet(64, 48, engine.cfg)
        points.add(0, 0, intensity=10)
        _, meta_a = engine.render(image, points)
        points.move(0, 63, 47)
        _, meta_b = engine.render(image, points)
        assert meta_a["mask"][0, 0].item() == pytest.approx(1.0)
        assert meta_b["mask"][0, 0].item() < 1.0

    def test_default_blur(self):
        img = make_placeholder(64, 40)
        out, meta = RadialBlurEngine(BlurConfig(global_max=3)).render(img, [BlurPoint(32, 20, 3, 100)])
        assert meta["status"] == "success"
        assert out.shape == img.shape


class TestPreview:
    def test_mask_to_image(self):
        mask = torch.tensor([[0.0, 1.0], [0.5, 2.0]])
        img = mask_to_image(mask)
        assert img.dtype == np.uint8
        assert img.tolist() == [[0, 255], [128, 255]]

    def test_overlay(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        mask = torch.ones(2, 2)
        out = render_gradient_preview(image, mask, opacity=0.5)
        assert out.shape == (2, 2, 4)
        assert np.all(out[..., :3] == 128)
        assert np.all(out[..., 3] == 255)

    def test_only_gradient(self):
        image = np.zeros((2, 2, 3), dtype=np.uint8)
        mask = torch.tensor([[0.0, 1.0], [1.0, 0.0]])
        out = render_gradient_preview(image, mask, opacity=1.0, only_gradient=True)
        assert out[0, 1, 0] == 255
        assert out[0, 0, 0] == 0
        assert np.all(out[..., 3] == 255)

    def test_keeps_image_alpha(self):
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[..., 3] = 7
        out = render_gradient_preview(image, torch.zeros(2, 2), opacity=0.7)
        assert np.all(out[..., 3] == 7)

    def test_float_image_scaled(self):
        image = np.ones((2, 2, 3), dtype=np.float32)
        out = render_gradient_preview(image, torch.zeros(2, 2), opacity=0.5)
        assert np.all(out[..., :3] == 128)
        assert np.all(out[..., 3] == 255)


class TestBlurPrimitive:
    def test_zero_radius_copies(self):
        img = np.arange(12, dtype=np.uint8).reshape(2, 2, 3)
        out = gaussian_blur(img, 0)
        assert np.array_equal(out, img)
        assert out is not img

    def test_constant_image_unchanged(self):
        img = np.full((20, 20, 4), 90, dtype=np.uint8)
        assert np.array_equal(gaussian_blur(img, 5), img)

    def test_single_channel_shape(self):
        img = np.zeros((10, 10, 1), dtype=np.uint8)
        assert gaussian_blur(img, 2).shape == (10, 10, 1)

    def test_smooths_edges(self):
        img = np.zeros((21, 21), dtype=np.uint8)
        img[:, 10:] = 255
        out = gaussian_blur(img, 3)
        assert 0 < out[10, 9] < 255

    def test_placeholder(self):
        img = make_placeholder()
        assert img.shape == (500, 800, 3)
        assert img.dtype == np.uint8
