"""End-to-end tests for the command-line entry point."""

import pytest
import numpy as np

from rowforge import cohort
from rowforge.cli import main, samples_per_subpixel
from rowforge.output import read_ppm


def run(tmp_path, *extra, name="image.ppm"):
    output = tmp_path / name
    argv = ["--output", str(output), "--log-dir", str(tmp_path / "Data"), *extra]
    return main(argv), output


class TestSamplesPerSubpixel:
    """Test the per-pixel to per-sub-pixel conversion."""

    def test_split_over_four(self):
        assert samples_per_subpixel(4) == 1
        assert samples_per_subpixel(40) == 10

    def test_small_counts_round_up_to_one(self):
        assert samples_per_subpixel(1) == 1

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            samples_per_subpixel(0)


class TestMain:
    """Test full runs."""

    def test_64x64_single_worker(self, tmp_path):
        code, output = run(tmp_path, "--width", "64", "--height", "64", "--samples", "1", "--workers", "1")
        assert code == 0

        tokens = output.read_text().split()
        assert tokens[0] == "P3"
        assert tokens[1:4] == ["64", "64", "255"]

        values = [int(t) for t in tokens[4:]]
        assert len(values) == 64 * 64 * 3
        assert all(0 <= v <= 255 for v in values)

    def test_rerun_is_byte_identical(self, tmp_path):
        args = ("--width", "12", "--height", "10", "--workers", "3", "--no-timing")
        code_a, first = run(tmp_path, *args, name="a.ppm")
        code_b, second = run(tmp_path, *args, name="b.ppm")

        assert code_a == code_b == 0
        assert first.read_bytes() == second.read_bytes()

    def test_worker_count_does_not_change_rows(self, tmp_path):
        _, one = run(tmp_path, "--width", "8", "--height", "9", "--workers", "1", "--no-timing", name="one.ppm")
        _, two = run(tmp_path, "--width", "8", "--height", "9", "--workers", "2", "--no-timing", name="two.ppm")
        np.testing.assert_array_equal(read_ppm(one), read_ppm(two))

    def test_timing_log_written(self, tmp_path):
        code, _ = run(tmp_path, "--width", "4", "--height", "4", "--tag", "smoke")
        assert code == 0

        logs = list((tmp_path / "Data").glob("smoke_*.csv"))
        assert len(logs) == 1
        fields = logs[0].read_text().strip().split(",")
        assert fields[:4] == ["4", "4", "4", "1"]
        assert int(fields[4]) >= 0

    def test_no_timing(self, tmp_path):
        run(tmp_path, "--width", "4", "--height", "4", "--no-timing")
        assert not (tmp_path / "Data").exists()

    def test_png_output(self, tmp_path):
        code, output = run(tmp_path, "--width", "4", "--height", "3", "--no-timing", name="image.png")
        assert code == 0
        assert output.exists()

    @pytest.mark.parametrize("args", [
        ("--width", "0"),
        ("--height", "-3"),
        ("--samples", "0"),
        ("--workers", "-1"),
    ])
    def test_invalid_arguments_exit(self, tmp_path, args):
        with pytest.raises(SystemExit) as exc_info:
            run(tmp_path, *args)
        assert exc_info.value.code == 2

    def test_rank_failure_exits_without_output(self, tmp_path, monkeypatch):
        def broken_rank(task):
            raise RuntimeError(f"rank {task.rank} crashed")

        monkeypatch.setattr(cohort, "render_rank", broken_rank)
        code, output = run(tmp_path, "--width", "4", "--height", "4", "--workers", "1")

        assert code == 1
        assert not output.exists()
        assert not (tmp_path / "Data").exists()

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "render.log"
        code, _ = run(tmp_path, "--width", "4", "--height", "4", "--no-timing", "--log-file", str(log_file))
        assert code == 0

        text = log_file.read_text()
        assert "[Rank 0] assigned rows 0-3" in text
        assert "INFO" in text

    def test_info(self, capsys):
        assert main(["--info"]) == 0
        assert "CPU Cores" in capsys.readouterr().out
