"""Tests for locating and running the analysis binaries."""

from pathlib import Path

import pytest

from mole import errors, runner
from mole.config import Config
from mole.errors import ErrorCode
from mole.runner import Binary


class TestBinaryPaths:
    def test_filenames(self):
        assert Binary.ANALYZE.filename == "analyze-go"
        assert Binary.STATUS.filename == "status-go"

    def test_default_bin_dir_is_package_bin(self):
        assert runner.get_bin_dir(Config.load()) == Path(runner.__file__).resolve().parent / "bin"

    def test_bin_dir_override(self, bin_dir: Path):
        assert runner.get_bin_dir() == bin_dir
        assert runner.binary_path("status") == bin_dir / "status-go"

    def test_unknown_binary(self):
        assert runner.binary_path("clean") is None
        assert runner.validate_binary("clean") == ErrorCode.INVALID_ARG


class TestValidateBinary:
    def test_missing(self, bin_dir: Path):
        assert runner.validate_binary(Binary.ANALYZE) == ErrorCode.FILE_NOT_FOUND
        assert "analyze-go" in errors.get_last_error()

    def test_not_executable(self, bin_dir: Path, make_script):
        make_script(bin_dir / "analyze-go", "exit 0", executable=False)
        assert runner.validate_binary(Binary.ANALYZE) == ErrorCode.PERMISSION_DENIED

    def test_ok(self, bin_dir: Path, make_script):
        make_script(bin_dir / "analyze-go", "exit 0")
        assert runner.validate_binary(Binary.ANALYZE) == ErrorCode.SUCCESS


class TestBuildEnvironment:
    def test_defaults(self, tmp_path: Path):
        env = runner.build_environment(Config(tmp_path), is_tty=False, base={})
        assert env == {"MO_COLOR": "never", "MO_TIMEOUT": "300"}

    def test_flags_and_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MO_DEBUG", "1")
        monkeypatch.setenv("MO_DRY_RUN", "true")
        monkeypatch.setenv("MO_TIMEOUT", "30")
        config = Config.load(tmp_path)

        env = runner.build_environment(config, "/data", is_tty=True, base={"HOME": "/home/u"})

        assert env["MO_DEBUG"] == "1"
        assert env["MO_DRY_RUN"] == "1"
        assert env["MO_TIMEOUT"] == "30"
        assert env["MO_COLOR"] == "auto"
        assert env["MO_ANALYZE_PATH"] == "/data"
        assert env["HOME"] == "/home/u"

    def test_disabled_flags_are_removed(self, tmp_path: Path):
        base = {"MO_DEBUG": "1", "MO_DRY_RUN": "1"}
        env = runner.build_environment(Config(tmp_path), is_tty=False, base=base)
        assert "MO_DEBUG" not in env
        assert "MO_DRY_RUN" not in env

    def test_explicit_color_is_passed_through(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MO_COLOR", "always")
        env = runner.build_environment(Config.load(tmp_path), is_tty=False, base={})
        assert env["MO_COLOR"] == "always"


class TestRunBinary:
    def test_success_passes_environment(self, bin_dir: Path, tmp_path: Path, make_script):
        out = tmp_path / "seen.txt"
        make_script(bin_dir / "analyze-go", f'echo "$MO_ANALYZE_PATH $MO_TIMEOUT" > "{out}"')

        assert runner.run_analyze(tmp_path / "scan") == 0
        assert out.read_text().strip() == f"{tmp_path / 'scan'} 300"

    def test_analyze_defaults_to_cwd(
        self, bin_dir: Path, tmp_path: Path, make_script, monkeypatch: pytest.MonkeyPatch
    ):
        out = tmp_path / "seen.txt"
        make_script(bin_dir / "analyze-go", f'echo "$MO_ANALYZE_PATH" > "{out}"')
        monkeypatch.chdir(tmp_path)

        assert runner.run_analyze() == 0
        assert out.read_text().strip() == str(tmp_path)

    def test_status_has_no_analyze_path(self, bin_dir: Path, tmp_path: Path, make_script):
        out = tmp_path / "seen.txt"
        make_script(bin_dir / "status-go", f'echo "[${{MO_ANALYZE_PATH:-}}]" > "{out}"')

        assert runner.run_status() == 0
        assert out.read_text().strip() == "[]"

    def test_failure_records_error(self, bin_dir: Path, make_script):
        make_script(bin_dir / "status-go", "exit 7")

        assert runner.run_status() == 7
        assert errors.get_last_error_code() == 7
        assert "status-go failed with exit code 7" in errors.get_last_error()

    def test_user_cancel_is_not_an_error(self, bin_dir: Path, make_script):
        make_script(bin_dir / "status-go", "exit 130")

        assert runner.run_status() == 130
        assert errors.get_last_error() == ""

    def test_missing_binary(self, bin_dir: Path):
        assert runner.run_status() == ErrorCode.FILE_NOT_FOUND

    def test_killed_by_signal_maps_to_128_plus_n(self, bin_dir: Path, make_script):
        make_script(bin_dir / "status-go", "kill -TERM $$")
        assert runner.run_status() == 143


class TestPlatform:
    @pytest.mark.parametrize(
        "machine,expected",
        [
            ("arm64", "arm64"),
            ("aarch64", "arm64"),
            ("x86_64", "amd64"),
            ("AMD64", "amd64"),
            ("riscv64", "riscv64"),
        ],
    )
    def test_arch_suffix(self, machine: str, expected: str, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(runner.platform, "machine", lambda: machine)
        assert runner.get_arch_suffix() == expected

    def test_apple_silicon(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(runner.platform, "machine", lambda: "arm64")
        assert runner.is_apple_silicon() is True
        monkeypatch.setattr(runner.platform, "machine", lambda: "x86_64")
        assert runner.is_apple_silicon() is False


class TestInstallationInfo:
    def test_version_states(self, bin_dir: Path, make_script):
        assert runner.get_binary_version("nope") == "unknown"
        assert runner.get_binary_version(Binary.STATUS) == "not installed"

        make_script(bin_dir / "status-go", 'echo "status-go 1.2.3"')
        assert runner.get_binary_version(Binary.STATUS) == "status-go 1.2.3"

        make_script(bin_dir / "status-go", "exit 1")
        assert runner.get_binary_version(Binary.STATUS) == "installed"

    def test_verify_installation(self, bin_dir: Path, make_script, capsys: pytest.CaptureFixture):
        make_script(bin_dir / "analyze-go", "exit 0")
        assert runner.verify_installation() is False
        assert "status-go binary not available" in capsys.readouterr().err

        make_script(bin_dir / "status-go", "exit 0")
        assert runner.verify_installation() is True
