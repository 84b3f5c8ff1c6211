"""Tests for the command-line example scripts.

Taichi is already initialized by conftest.py, so these tests call the
rendering functions directly and only exercise main() on paths that exit
before initializing Taichi.
"""


class TestRenderScript:
    """Tests for examples/render_cornell_box.py."""

    def test_parse_args_defaults(self):
        from examples.render_cornell_box import parse_args

        args = parse_args([])

        assert (args.width, args.height) == (768, 768)
        assert args.samples == 1000
        assert args.max_depth == 5
        assert args.median_size == 5
        assert args.denoise_passes == 10
        assert args.output == "cornell_box.png"
        assert args.arch == "cpu"

    def test_invalid_settings_exit_with_error(self, capsys):
        """Test that an even median size is reported and exits with status 1."""
        from examples.render_cornell_box import main

        assert main(["--median-size", "4", "--quiet"]) == 1
        assert "median_size" in capsys.readouterr().err

    def test_render_writes_png(self, tmp_path, capsys):
        """Test a tiny end-to-end render to disk."""
        from examples.render_cornell_box import render_cornell_box
        from src.pathtracer.config import RenderConfig
        from src.pathtracer.preview.export import load_png

        config = RenderConfig(width=8, height=8, sample_budget=2, median_size=3, denoise_repetitions=1)
        output = tmp_path / "box.png"
        raw = tmp_path / "raw.png"

        result = render_cornell_box(config, output_path=str(output), raw_output_path=str(raw))

        assert result == output
        assert load_png(output).shape == (8, 8, 3)
        assert load_png(raw).shape == (8, 8, 3)
        assert "100%" in capsys.readouterr().out


class TestInteractiveScript:
    """Tests for examples/interactive_cornell_box.py."""

    def test_parse_args_defaults(self):
        from examples.interactive_cornell_box import parse_args

        args = parse_args([])

        assert (args.width, args.height) == (768, 768)
        assert args.samples == 1000
        assert not args.verbose

    def test_invalid_settings_exit_with_error(self, capsys):
        from examples.interactive_cornell_box import main

        assert main(["--samples", "0"]) == 1
        assert "sample_budget" in capsys.readouterr().err
