"""
Tests for the glowstick command line interface.
"""

import numpy as np
import pytest


@pytest.fixture
def photo(tmp_path, gradient_image):
    """An 8-bit PNG on disk."""
    from glowstick.core.image import write_image
    return write_image(tmp_path / "photo.png", gradient_image)


class TestCommands:
    """Tests for the CLI subcommands."""

    def test_no_command(self, capsys):
        """Test that running without a command prints help."""
        from glowstick.__main__ import main

        assert main([]) == 0
        assert "render" in capsys.readouterr().out

    def test_params(self, capsys):
        """Test listing the parameters."""
        from glowstick.__main__ import main

        assert main(["params"]) == 0
        out = capsys.readouterr().out
        assert "blend_mode (enum, default softlight)" in out
        assert "softglow_brightness" in out
        assert "0.0 .. 0.25" in out

    def test_graph_default(self, capsys):
        """Test printing the default chain."""
        from glowstick.__main__ import main

        assert main(["graph"]) == 0
        out = capsys.readouterr().out
        assert "Effect 0: softlight" in out
        assert "blend-softlight[aux: color]" in out
        assert "bloom: bypassed, softglow: bypassed" in out

    def test_graph_overrides(self, capsys):
        """Test that --set changes the assembled chain."""
        from glowstick.__main__ import main

        assert main(["graph", "--set", "blend-mode=hard-light", "-s", "bloom_strength=5"]) == 0
        out = capsys.readouterr().out
        assert "blend-hardlight" in out
        assert "bloom: on, softglow: bypassed" in out

    def test_graph_environment(self, capsys, monkeypatch):
        """Test that GLOWSTICK_<PARAM> variables are picked up."""
        from glowstick.__main__ import main

        monkeypatch.setenv("GLOWSTICK_BLEND_MODE", "burn")
        assert main(["graph"]) == 0
        assert "blend-burn" in capsys.readouterr().out

        assert main(["graph", "--set", "blend_mode=overlay"]) == 0
        assert "blend-overlay" in capsys.readouterr().out

    def test_invalid_value(self, capsys):
        """Test that out-of-range values fail with an error message."""
        from glowstick.__main__ import main

        assert main(["graph", "--set", "noise_reduction=9"]) == 1
        assert "Error:" in capsys.readouterr().err

        assert main(["graph", "--set", "noise_reduction"]) == 1

    def test_presets(self, tmp_path, capsys):
        """Test stacking presets from a config file."""
        from glowstick.__main__ import main

        config = tmp_path / "glowstick.json"
        assert main(["config", "--create", str(config)]) == 0
        assert config.exists()

        assert main(["graph", "-c", str(config), "-p", "neon", "-p", "dreamy"]) == 0
        out = capsys.readouterr().out
        assert "Effect 0: hardlight" in out
        assert "Effect 1: multiply" in out

        assert main(["graph", "-c", str(config), "-p", "missing"]) == 1

    def test_missing_config(self, tmp_path):
        from glowstick.__main__ import main

        assert main(["graph", "-c", str(tmp_path / "none.json")]) == 1


class TestRender:
    """Tests for the render command."""

    def test_render_default_output(self, photo, capsys):
        """Test that the output lands next to the input with the suffix."""
        from glowstick.__main__ import main
        from glowstick.core.image import read_image

        assert main(["render", str(photo)]) == 0
        out_path = photo.with_name("photo_glow.png")
        assert out_path.exists()

        loaded = read_image(out_path)
        assert loaded.rgb.shape == (12, 16, 3)
        assert "Done!" in capsys.readouterr().out

    def test_render_explicit_output(self, photo, tmp_path):
        """Test -o with parameters and 16-bit output."""
        from glowstick.__main__ import main
        from glowstick.core.image import read_image

        target = tmp_path / "neon.png"
        args = ["render", str(photo), "-o", str(target), "--16bit",
                "--set", "blend_mode=multiply", "--set", "softglow_brightness=0.2"]
        assert main(args) == 0

        loaded = read_image(target)
        assert loaded.properties.dtype == "uint16"
        assert np.isfinite(loaded.rgb).all()

    def test_render_many_to_directory(self, tmp_path, gradient_image):
        """Test several inputs written into an output directory."""
        from glowstick.__main__ import main
        from glowstick.core.image import write_image

        inputs = [write_image(tmp_path / f"in{i}.png", gradient_image) for i in range(2)]
        outdir = tmp_path / "out"
        assert main(["render", *map(str, inputs), "-o", str(outdir)]) == 0
        assert (outdir / "in0.png").exists()
        assert (outdir / "in1.png").exists()

    def test_render_missing_input(self, tmp_path, capsys):
        from glowstick.__main__ import main

        assert main(["render", str(tmp_path / "missing.png")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_verbose(self, photo, capsys):
        """Test that -v prints assembly messages."""
        from glowstick.__main__ import main

        assert main(["render", str(photo), "-v"]) == 0
        assert "Reconfigured" in capsys.readouterr().out


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
