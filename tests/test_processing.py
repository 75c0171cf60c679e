"""
Tests for glowstick image operations.
"""

import numpy as np
import pytest


class TestRegistry:
    """Tests for the operation registry."""

    def test_core_operations_registered(self):
        """Test that every operation the effect needs is available."""
        from glowstick.processing import get_operations

        ops = get_operations()
        for name in ("color", "crop", "bloom", "softglow", "nop", "hue-chroma",
                     "noise-reduction", "graph", "layer-mode", "desaturate", "invert-gamma"):
            assert name in ops

    def test_namespace_prefix(self):
        """Test that gegl:/gimp: prefixes resolve to the same operation."""
        from glowstick.processing import get_operation

        assert get_operation("gegl:crop") is get_operation("crop")
        assert get_operation("gimp:layer-mode") is get_operation("layer-mode")

    def test_unknown_operation(self):
        """Test that unknown names raise ValueError."""
        from glowstick.processing import get_operation

        with pytest.raises(ValueError):
            get_operation("gegl:sharpen")

    def test_apply_operation_checks_properties(self, grey_image):
        """Test that apply_operation refuses undeclared properties."""
        from glowstick.processing import apply_operation

        with pytest.raises(ValueError):
            apply_operation("nop", grey_image, radius=3)


class TestColor:
    """Tests for colour helpers and colour operations."""

    def test_parse_hex(self):
        """Test hex colour parsing."""
        from glowstick.processing import parse_color

        assert parse_color("#ffffff") == (1.0, 1.0, 1.0)
        assert parse_color("#fff") == (1.0, 1.0, 1.0)
        r, g, b = parse_color("#ffacf9")
        assert r == 1.0
        assert g == pytest.approx(172 / 255)
        assert b == pytest.approx(249 / 255)
        assert parse_color("#00ff0580") == pytest.approx((0.0, 1.0, 5 / 255))

    def test_parse_sequence(self):
        """Test float and 0-255 sequences."""
        from glowstick.processing import parse_color

        assert parse_color((0.0, 0.5, 1.0)) == (0.0, 0.5, 1.0)
        assert parse_color([255, 0, 0]) == (1.0, 0.0, 0.0)

    def test_parse_invalid(self):
        """Test that malformed colours raise ValueError."""
        from glowstick.processing import parse_color

        for bad in ("#12", "#gggggg", (1, 2), 5):
            with pytest.raises(ValueError):
                parse_color(bad)

    def test_format_color(self):
        """Test hex formatting."""
        from glowstick.processing import format_color

        assert format_color((1.0, 172 / 255, 249 / 255)) == "#ffacf9"

    def test_color_plane(self):
        """Test that the colour fill is a 1x1 plane."""
        from glowstick.processing import apply_operation

        plane = apply_operation("color", None, value="#ff0000")
        assert plane.shape == (1, 1, 3)
        assert plane.dtype == np.float32
        np.testing.assert_array_equal(plane[0, 0], [1.0, 0.0, 0.0])

    def test_desaturate(self, gradient_image):
        """Test that desaturate makes all channels equal."""
        from glowstick.processing import apply_operation

        grey = apply_operation("desaturate", gradient_image)
        assert grey.shape == gradient_image.shape
        np.testing.assert_allclose(grey[:, :, 0], grey[:, :, 1])
        np.testing.assert_allclose(grey[:, :, 1], grey[:, :, 2])

    def test_invert_gamma(self, gradient_image):
        """Test 1 - x inversion."""
        from glowstick.processing import apply_operation

        out = apply_operation("invert-gamma", gradient_image)
        np.testing.assert_allclose(out, 1.0 - gradient_image, atol=1e-6)

    def test_hue_chroma_identity(self, gradient_image):
        """Test that zero adjustments leave the image untouched."""
        from glowstick.processing import apply_operation

        out = apply_operation("hue-chroma", gradient_image)
        np.testing.assert_array_equal(out, gradient_image)
        assert out is not gradient_image

    def test_hue_chroma_lightness(self, grey_image):
        """Test that positive lightness brightens."""
        from glowstick.processing import apply_operation

        out = apply_operation("hue-chroma", grey_image, lightness=10.0)
        assert out.mean() > grey_image.mean()

        darker = apply_operation("hue-chroma", grey_image, lightness=-10.0)
        assert darker.mean() < grey_image.mean()


class TestBlend:
    """Tests for layer-mode compositing."""

    def test_every_mode_in_range(self, gradient_image):
        """Test that all modes keep shape and stay in 0-1."""
        from glowstick.processing import LayerMode, blend

        layer = np.array([1.0, 0.67, 0.98], dtype=np.float32).reshape(1, 1, 3)
        for mode in LayerMode:
            out = blend(gradient_image, layer, mode)
            assert out.shape == gradient_image.shape, mode
            assert out.dtype == np.float32, mode
            assert np.isfinite(out).all(), mode
            assert out.min() >= 0.0 and out.max() <= 1.0, mode

    def test_multiply_perceptual(self, grey_image):
        """Test multiply evaluated on perceptual values."""
        from glowstick.processing import BlendSpace, LayerMode, blend

        layer = np.full((1, 1, 3), 0.5, dtype=np.float32)
        out = blend(grey_image, layer, LayerMode.MULTIPLY, BlendSpace.RGB_PERCEPTUAL)
        np.testing.assert_allclose(out, 0.25, atol=1e-6)

    def test_multiply_white_is_identity(self, gradient_image):
        """Test that multiplying by white changes nothing in linear space."""
        from glowstick.processing import BlendSpace, LayerMode, blend

        white = np.ones((1, 1, 3), dtype=np.float32)
        out = blend(gradient_image, white, LayerMode.MULTIPLY, BlendSpace.RGB_LINEAR)
        np.testing.assert_allclose(out, gradient_image, atol=1e-4)

    def test_grain_merge_mid_grey(self, gradient_image):
        """Test that grain merge with mid grey is neutral."""
        from glowstick.processing import LayerMode, blend

        layer = np.full((1, 1, 3), 0.5, dtype=np.float32)
        out = blend(gradient_image, layer, LayerMode.GRAIN_MERGE)
        np.testing.assert_allclose(out, gradient_image, atol=1e-6)

    def test_color_modes_with_grey_layer(self, gradient_image):
        """Test that a neutral layer in a colour mode gives neutral output."""
        from glowstick.processing import LayerMode, blend

        grey = np.full((1, 1, 3), 0.5, dtype=np.float32)
        for mode in (LayerMode.HSL_COLOR, LayerMode.LCH_COLOR):
            out = blend(gradient_image, grey, mode)
            np.testing.assert_allclose(out[:, :, 0], out[:, :, 1], atol=2e-3)
            np.testing.assert_allclose(out[:, :, 1], out[:, :, 2], atol=2e-3)

    def test_auto_space(self):
        """Test AUTO resolution per mode."""
        from glowstick.processing import BlendSpace, LayerMode, resolve_blend_space

        assert resolve_blend_space(LayerMode.MULTIPLY, BlendSpace.AUTO) == BlendSpace.RGB_LINEAR
        assert resolve_blend_space(LayerMode.LCH_COLOR, BlendSpace.AUTO) == BlendSpace.LAB
        assert resolve_blend_space(LayerMode.SOFTLIGHT, BlendSpace.AUTO) == BlendSpace.RGB_PERCEPTUAL
        assert resolve_blend_space(LayerMode.BURN, BlendSpace.RGB_PERCEPTUAL) == BlendSpace.RGB_PERCEPTUAL

    def test_layer_mode_without_aux(self, gradient_image):
        """Test that the operation passes through when nothing is composited."""
        from glowstick.processing import apply_operation

        assert apply_operation("layer-mode", gradient_image) is gradient_image

    def test_layer_mode_opacity(self, grey_image):
        """Test that opacity mixes between input and blend."""
        from glowstick.processing import BlendSpace, LayerMode, apply_operation

        black = np.zeros((1, 1, 3), dtype=np.float32)
        out = apply_operation(
            "layer-mode", grey_image, black,
            layer_mode=LayerMode.MULTIPLY, blend_space=BlendSpace.RGB_PERCEPTUAL, opacity=0.5,
        )
        np.testing.assert_allclose(out, 0.25, atol=1e-6)


class TestGlow:
    """Tests for bloom and softglow."""

    def test_bloom_zero_strength(self, gradient_image):
        """Test that bloom at zero strength is a no-op."""
        from glowstick.processing import apply_operation

        out = apply_operation("bloom", gradient_image, strength=0.0)
        np.testing.assert_allclose(out, gradient_image, atol=1e-4)

    def test_bloom_brightens(self, gradient_image):
        """Test that bloom never darkens and adds light near highlights."""
        from glowstick.processing import apply_operation

        out = apply_operation("bloom", gradient_image, strength=80.0, threshold=30.0, radius=4.0)
        assert out.shape == gradient_image.shape
        assert (out >= gradient_image - 1e-4).all()
        assert out.sum() > gradient_image.sum()

    def test_softglow_zero_brightness(self, gradient_image):
        """Test that softglow at zero brightness is a no-op."""
        from glowstick.processing import apply_operation

        out = apply_operation("softglow", gradient_image, brightness=0.0)
        np.testing.assert_allclose(out, gradient_image, atol=1e-6)

    def test_softglow_brightens(self, gradient_image):
        """Test that softglow screens light over the image."""
        from glowstick.processing import apply_operation

        out = apply_operation("softglow", gradient_image, brightness=0.25, glow_radius=3.0)
        assert (out >= gradient_image - 1e-6).all()
        assert out.sum() > gradient_image.sum()


class TestNoiseReduction:
    """Tests for edge-preserving smoothing."""

    def test_zero_iterations(self, gradient_image):
        """Test that zero passes return the input values."""
        from glowstick.processing import apply_operation

        out = apply_operation("noise-reduction", gradient_image, iterations=0)
        np.testing.assert_array_equal(out, gradient_image)

    def test_reduces_noise(self):
        """Test that small noise on a flat field is smoothed."""
        from glowstick.processing import apply_operation

        rng = np.random.default_rng(7)
        noisy = (0.5 + rng.normal(0.0, 0.02, (16, 16, 3))).astype(np.float32)
        out = apply_operation("noise-reduction", noisy, iterations=4)
        assert out.std() < noisy.std()

    def test_keeps_strong_edges(self):
        """Test that a hard edge survives smoothing."""
        from glowstick.processing import apply_operation

        edge = np.zeros((8, 8, 3), dtype=np.float32)
        edge[:, 4:] = 1.0
        out = apply_operation("noise-reduction", edge, iterations=6)
        assert out[:, 0].max() < 0.05
        assert out[:, -1].min() > 0.95


class TestGeometry:
    """Tests for crop and nop."""

    def test_nop(self, gradient_image):
        from glowstick.processing import apply_operation

        assert apply_operation("nop", gradient_image) is gradient_image

    def test_crop_to_aux(self, gradient_image):
        """Test cropping to the aux image's extent."""
        from glowstick.processing import apply_operation

        aux = np.zeros((5, 7, 3), dtype=np.float32)
        out = apply_operation("crop", gradient_image, aux)
        assert out.shape == (5, 7, 3)
        np.testing.assert_array_equal(out, gradient_image[:5, :7])

    def test_crop_same_extent(self, gradient_image):
        """Test that cropping to the input's own extent keeps everything."""
        from glowstick.processing import apply_operation

        out = apply_operation("crop", gradient_image, gradient_image)
        np.testing.assert_array_equal(out, gradient_image)

    def test_crop_unbounded_aux(self, gradient_image):
        """Test that a 1x1 plane on aux leaves the input uncropped."""
        from glowstick.processing import apply_operation

        plane = np.zeros((1, 1, 3), dtype=np.float32)
        assert apply_operation("crop", gradient_image, plane) is gradient_image

    def test_crop_rectangle(self, gradient_image):
        """Test rectangle cropping without aux."""
        from glowstick.processing import apply_operation

        out = apply_operation("crop", gradient_image, x=2, y=1, width=4, height=3)
        np.testing.assert_array_equal(out, gradient_image[1:4, 2:6])
        assert apply_operation("crop", gradient_image) is gradient_image


class TestChainStrings:
    """Tests for textual operation chains."""

    def test_parse(self):
        """Test parsing operations and properties."""
        from glowstick.processing import parse_chain

        assert parse_chain("gimp:desaturate invert-gamma") == (
            ("desaturate", ()),
            ("invert-gamma", ()),
        )
        assert parse_chain("noise-reduction iterations=3 hue-chroma chroma=4.5") == (
            ("noise-reduction", (("iterations", 3),)),
            ("hue-chroma", (("chroma", 4.5),)),
        )
        assert parse_chain("") == ()

    def test_rejected_syntax(self):
        """Test that unsupported or invalid chains raise ValueError."""
        from glowstick.processing import parse_chain

        for bad in (
            "over aux=[ color value=red ]",
            "nop id=a",
            "iterations=3",
            "noise-reduction radius=3",
            "color",
            "graph",
            "unknown-op",
        ):
            with pytest.raises(ValueError):
                parse_chain(bad)

    def test_values_typed_by_default(self):
        """Test that property values take the type of the declared default."""
        from glowstick.processing import LayerMode, parse_chain

        assert parse_chain("hue-chroma chroma=4") == (("hue-chroma", (("chroma", 4.0),)),)
        assert parse_chain("bloom limit-exposure=yes") == (
            ("bloom", (("limit_exposure", True),)),
        )
        (_, props), = parse_chain("layer-mode layer-mode=hardlight blend-space=2")
        assert dict(props)["layer_mode"] is LayerMode.HARDLIGHT
        assert int(dict(props)["blend_space"]) == 2

    def test_bad_values_rejected(self):
        """Test that values of the wrong type fail while parsing."""
        from glowstick.processing import parse_chain

        for bad in (
            "noise-reduction iterations=abc",
            "noise-reduction iterations=2.5",
            "hue-chroma chroma=lots",
            "hue-chroma lightness=inf",
            "bloom limit-exposure=maybe",
            "layer-mode layer-mode=dissolve",
        ):
            with pytest.raises(ValueError):
                parse_chain(bad)

    def test_run_chain(self, gradient_image):
        """Test that a chain applies its operations in order."""
        from glowstick.processing import apply_operation, run_chain

        out = run_chain("gimp:desaturate invert-gamma", gradient_image)
        expected = 1.0 - apply_operation("desaturate", gradient_image)
        np.testing.assert_allclose(out, expected, atol=1e-6)

    def test_graph_operation(self, gradient_image):
        """Test the graph operation wrapping a chain."""
        from glowstick.processing import apply_operation

        out = apply_operation("graph", gradient_image, string="invert-gamma invert-gamma")
        np.testing.assert_allclose(out, gradient_image, atol=1e-6)
        assert apply_operation("graph", gradient_image) is gradient_image


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
