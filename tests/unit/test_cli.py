"""Unit tests for CLI functionality."""

import numpy as np
import pytest
from click.testing import CliRunner

import pyfastsample as ps


class TestCLIResampleCommands:
    """Test the resample and sample commands."""

    @pytest.fixture
    def runner(self, monkeypatch):
        """Provide Click test runner; Taichi is already up for the session."""
        monkeypatch.setattr(ps, "init", lambda *args, **kwargs: None)
        return CliRunner()

    @pytest.fixture
    def npy_input(self, tmp_path, test_data_manager):
        path = tmp_path / "in.npy"
        np.save(path, test_data_manager.create_random(width=12, height=8, channels=3))
        return path

    @pytest.mark.unit
    def test_resample_help(self, runner):
        from pyfastsample.cli.resample_commands import resample

        result = runner.invoke(resample, ["--help"])
        assert result.exit_code == 0
        assert "Resample INPUT_IMAGE" in result.output

    @pytest.mark.unit
    def test_sample_help(self, runner):
        from pyfastsample.cli.resample_commands import sample

        result = runner.invoke(sample, ["--help"])
        assert result.exit_code == 0
        assert "Print the filtered pixel" in result.output

    @pytest.mark.unit
    def test_resample_requires_args(self, runner):
        from pyfastsample.cli.resample_commands import resample

        result = runner.invoke(resample, [])
        assert result.exit_code != 0

    @pytest.mark.unit
    def test_resample_npy(self, runner, npy_input, tmp_path):
        from pyfastsample.cli.resample_commands import resample

        out_path = tmp_path / "out.npy"
        result = runner.invoke(
            resample, [str(npy_input), str(out_path), "-W", "5", "-H", "7", "-f", "box"]
        )
        assert result.exit_code == 0, result.output
        assert "(5x7)" in result.output
        assert np.load(out_path).shape == (7, 5, 3)

    @pytest.mark.unit
    def test_resample_keeps_aspect_ratio(self, runner, npy_input, tmp_path):
        from pyfastsample.cli.resample_commands import resample

        out_path = tmp_path / "out.npy"
        result = runner.invoke(resample, [str(npy_input), str(out_path), "-W", "6"])
        assert result.exit_code == 0, result.output
        assert np.load(out_path).shape == (4, 6, 3)

    @pytest.mark.unit
    def test_resample_scale(self, runner, npy_input, tmp_path):
        from pyfastsample.cli.resample_commands import resample

        out_path = tmp_path / "out.npy"
        result = runner.invoke(resample, [str(npy_input), str(out_path), "--scale", "2", "-v"])
        assert result.exit_code == 0, result.output
        assert "Horizontal pass 12 -> 24" in result.output
        assert np.load(out_path).shape == (16, 24, 3)

    @pytest.mark.unit
    def test_resample_missing_size(self, runner, npy_input, tmp_path):
        from pyfastsample.cli.resample_commands import resample

        result = runner.invoke(resample, [str(npy_input), str(tmp_path / "out.npy")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    @pytest.mark.unit
    def test_resample_normals_needs_three_channels(self, runner, tmp_path):
        from pyfastsample.cli.resample_commands import resample

        in_path = tmp_path / "gray.npy"
        np.save(in_path, np.ones((4, 4), dtype=np.float32))
        result = runner.invoke(
            resample, [str(in_path), str(tmp_path / "out.npy"), "-W", "2", "-H", "2", "-f", "normals"]
        )
        assert result.exit_code == 1

    @pytest.mark.unit
    def test_resample_png_region(self, runner, tmp_path):
        from PIL import Image

        from pyfastsample.cli.resample_commands import resample

        pixels = np.zeros((8, 8), dtype=np.uint8)
        pixels[:4, :4] = 255
        in_path = tmp_path / "in.png"
        Image.fromarray(pixels).save(in_path)

        out_path = tmp_path / "crop.png"
        result = runner.invoke(
            resample,
            [str(in_path), str(out_path), "-W", "4", "-H", "4", "-f", "nearest", "--region", "0", "0", "0.5", "0.5"],
        )
        assert result.exit_code == 0, result.output
        with Image.open(out_path) as img:
            assert img.size == (4, 4)
            assert np.all(np.asarray(img) == 255)

    @pytest.mark.unit
    def test_sample(self, runner, tmp_path):
        from pyfastsample.cli.resample_commands import sample

        in_path = tmp_path / "in.npy"
        np.save(in_path, np.arange(16, dtype=np.float32).reshape(4, 4))
        result = runner.invoke(sample, [str(in_path), "0.625", "0.375", "-f", "nearest"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "6"

    @pytest.mark.unit
    def test_lazy_cli_attributes(self):
        from pyfastsample import cli

        assert callable(cli.resample)
        assert callable(cli.sample)
        with pytest.raises(AttributeError):
            cli.not_a_command
