import io
import os
import sys

import pytest

from booster.cmdexec import CommandError, MockRunner, RealRunner, RunCall, default_runner
from booster.logstream import with_writer


def test_mock_records_calls_and_defaults_to_empty_output():
    runner = MockRunner()
    assert runner.run("git", "config", "--get", "user.name") == b""
    assert runner.calls == [RunCall("git", ("config", "--get", "user.name"))]


def test_mock_delegates_to_run_func():
    runner = MockRunner(run_func=lambda name, *args: (name + " " + " ".join(args)).encode())
    assert runner.run("echo", "a", "b") == b"echo a b"
    assert len(runner.calls) == 1


def test_mock_run_func_errors_propagate():
    def fail(name, *args):
        raise CommandError(name, args, 1, b"boom")

    runner = MockRunner(run_func=fail)
    with pytest.raises(CommandError) as info:
        runner.run("tool")
    assert info.value.output == b"boom"
    assert runner.calls == [RunCall("tool", ())]


def test_mock_look_path():
    assert MockRunner().look_path("mise") == ""
    runner = MockRunner(look_path_func=lambda name: "/usr/bin/" + name)
    assert runner.look_path("mise") == "/usr/bin/mise"


def test_real_runner_returns_output():
    out = default_runner().run(sys.executable, "-c", "import sys; sys.stdout.write('hi')")
    assert out == b"hi"


def test_real_runner_merges_stderr():
    out = RealRunner().run(
        sys.executable, "-c", "import sys; sys.stdout.write('out'); sys.stdout.flush(); sys.stderr.write('err')"
    )
    assert b"out" in out
    assert b"err" in out


def test_real_runner_failure_carries_output():
    with pytest.raises(CommandError) as info:
        RealRunner().run(sys.executable, "-c", "import sys; sys.stdout.write('out'); sys.exit(3)")
    assert info.value.returncode == 3
    assert info.value.output == b"out"


def test_real_runner_missing_program():
    with pytest.raises(CommandError) as info:
        RealRunner().run("booster-no-such-program-xyz")
    assert info.value.returncode is None
    assert info.value.command == ("booster-no-such-program-xyz",)


def test_real_runner_streams_to_context_writer():
    stream = io.BytesIO()
    with with_writer(stream):
        out = RealRunner().run(sys.executable, "-c", "import sys; sys.stdout.write('streamed')")
    assert stream.getvalue() == out
    assert out == b"streamed"


def test_look_path_finds_executable(tmp_path, monkeypatch):
    tool = tmp_path / "mytool"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o755)
    monkeypatch.setenv("PATH", str(tmp_path))
    assert RealRunner().look_path("mytool") == os.path.join(str(tmp_path), "mytool")


def test_look_path_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(FileNotFoundError):
        RealRunner().look_path("booster-no-such-program-xyz")