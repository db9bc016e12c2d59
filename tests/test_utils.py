"""Unit tests for utility functions (asic_bootstrap.utils).

Tests cover:
- run_command (success, failure, timeout, missing binary, env merge)
- run_checked / CommandError
- command_exists, with_sudo
- download_file (mock httpx transport)
- format_duration
- Rich output helpers
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from asic_bootstrap.utils import (
    CommandError,
    command_exists,
    download_file,
    format_duration,
    print_error,
    print_info,
    print_section_header,
    print_success,
    print_summary_table,
    print_warning,
    run_checked,
    run_command,
    with_sudo,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# run_command / run_checked
# ---------------------------------------------------------------------------


class TestRunCommand:

    def test_successful_command(self):
        returncode, stdout, _ = run_command([sys.executable, "-c", "print('hello')"])
        assert returncode == 0
        assert stdout == "hello"

    def test_failed_command(self):
        returncode, _, _ = run_command([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert returncode == 3

    def test_command_with_cwd(self, tmp_path: Path):
        _, stdout, _ = run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert Path(stdout).resolve() == tmp_path.resolve()

    def test_env_is_merged(self):
        _, stdout, _ = run_command(
            [sys.executable, "-c", "import os; print(os.environ['ASIC_TEST_VAR'], 'PATH' in os.environ)"],
            env={"ASIC_TEST_VAR": "42"},
        )
        assert stdout == "42 True"

    def test_timeout_returns_minus_one(self):
        with patch(
            "subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="sleep", timeout=1),
        ):
            returncode, _, stderr = run_command(["sleep", "10"], timeout=1)
        assert returncode == -1
        assert "timed out" in stderr

    def test_missing_binary_returns_127(self):
        returncode, _, stderr = run_command(["definitely-not-a-real-binary-xyz"])
        assert returncode == 127
        assert "not found" in stderr

    def test_capture_false_returns_empty_output(self, completed_process):
        with patch("subprocess.run", return_value=completed_process(stdout=None)) as run:
            returncode, stdout, stderr = run_command(["true"], capture=False)
        assert (returncode, stdout, stderr) == (0, "", "")
        assert run.call_args.kwargs["capture_output"] is False


class TestRunChecked:

    def test_returns_stdout(self):
        assert run_checked([sys.executable, "-c", "print('ok')"], capture=True) == "ok"

    def test_raises_command_error(self, completed_process):
        with patch(
            "subprocess.run",
            return_value=completed_process(stderr="E: no such package", returncode=100),
        ):
            with pytest.raises(CommandError) as excinfo:
                run_checked(["apt-get", "install", "nope"], capture=True)

        err = excinfo.value
        assert err.returncode == 100
        assert err.command == "apt-get install nope"
        assert "no such package" in str(err)


class TestCommandHelpers:

    def test_command_exists_for_python(self):
        assert command_exists(Path(sys.executable).name) or command_exists("python3")

    def test_command_missing(self):
        assert command_exists("definitely-not-a-real-binary-xyz") is False

    def test_with_sudo_as_user(self):
        with patch("os.geteuid", return_value=1000, create=True):
            assert with_sudo(["apt-get", "update"]) == ["sudo", "apt-get", "update"]

    def test_with_sudo_as_root(self):
        with patch("os.geteuid", return_value=0, create=True):
            assert with_sudo(["apt-get", "update"]) == ["apt-get", "update"]


# ---------------------------------------------------------------------------
# download_file
# ---------------------------------------------------------------------------


class TestDownloadFile:

    def _stream_returning(self, response: httpx.Response) -> MagicMock:
        stream = MagicMock()
        stream.return_value.__enter__.return_value = response
        return stream

    def test_writes_body(self, tmp_path: Path):
        request = httpx.Request("GET", "https://get.docker.com")
        response = httpx.Response(200, content=b"#!/bin/sh\necho docker\n", request=request)
        with patch("httpx.stream", self._stream_returning(response)):
            path = download_file("https://get.docker.com", tmp_path / "sub" / "get-docker.sh")

        assert path.read_bytes() == b"#!/bin/sh\necho docker\n"

    def test_http_error_raises(self, tmp_path: Path):
        request = httpx.Request("GET", "https://get.docker.com")
        response = httpx.Response(503, request=request)
        with patch("httpx.stream", self._stream_returning(response)):
            with pytest.raises(httpx.HTTPStatusError):
                download_file("https://get.docker.com", tmp_path / "get-docker.sh")


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:

    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (-1, "0.0s"),
            (3.7, "3.7s"),
            (65.2, "1m 5s"),
            (3661.0, "1h 1m 1s"),
        ],
    )
    def test_formats(self, seconds: float, expected: str):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:

    def test_helpers_write_to_console(self, capsys):
        print_section_header("Installing")
        print_info("info message")
        print_success("success message")
        print_warning("warning message")
        print_error("error message")
        print_summary_table({"RAM": "16GB"}, title="Host resources")

        out = capsys.readouterr().out
        for text in ("Installing", "info message", "success message",
                     "warning message", "error message", "Host resources", "16GB"):
            assert text in out
