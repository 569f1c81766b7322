from __future__ import annotations

import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from swift_format_plugin.invoker import (
    FORMAT_ARGUMENTS,
    SwiftFormatCLI,
    build_arguments,
    classify,
    is_syntax_failure,
)
from swift_format_plugin.models import BadSyntax, Cancelled, FailedToStart, Success, UnknownFailure
from swift_format_plugin.project import Project
from swift_format_plugin.settings import SettingsState

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="fake executables are POSIX shell scripts")

SOURCE = "struct Point {\n    var x: Int; var y: Int\n}\n"


def test_build_arguments() -> None:
    assert build_arguments("/bin/swift-format") == ["/bin/swift-format", *FORMAT_ARGUMENTS]
    assert build_arguments("sf", Path("/tmp/cfg")) == [
        "sf",
        "format",
        "--parallel",
        "--ignore-unparsable-files",
        "--configuration",
        "/tmp/cfg",
    ]


def test_classify() -> None:
    assert classify(0, "out", "warning: something") == Success("out")
    bad = classify(1, "", "<stdin>:2:5: error: fatal error: invalid Swift syntax")
    assert isinstance(bad, BadSyntax)
    assert "invalid Swift syntax" in bad.message
    failure = classify(2, "", "boom")
    assert isinstance(failure, UnknownFailure)
    assert failure.message == "swift-format exited with status 2: boom"
    assert classify(70, "", "").message == "swift-format exited with status 70"


def test_is_syntax_failure() -> None:
    assert is_syntax_failure("error: Unable to format file.swift: invalid syntax")
    assert not is_syntax_failure("error: permission denied")
    assert not is_syntax_failure("")


def test_missing_executable_fails_to_start(tmp_path: Path) -> None:
    outcome = SwiftFormatCLI(tmp_path / "nope" / "swift-format").format_text(SOURCE)
    assert outcome == FailedToStart()
    assert outcome.message == "Failed to launch swift-format."


def test_blank_executable_fails_to_start() -> None:
    assert isinstance(SwiftFormatCLI("  ").format_text(SOURCE), FailedToStart)


def test_non_executable_file_fails_to_start(tmp_path: Path) -> None:
    plain = tmp_path / "swift-format"
    plain.write_text("#!/bin/sh\ncat\n", encoding="utf-8")
    assert isinstance(SwiftFormatCLI(plain).format_text(SOURCE), FailedToStart)


def test_success_returns_stdout_verbatim(fake_executable) -> None:
    executable = fake_executable("cat > /dev/null\nprintf 'X'\n")
    assert SwiftFormatCLI(executable).format_text(SOURCE) == Success("X")


def test_stdin_is_passed_through(fake_executable) -> None:
    executable = fake_executable("cat\n")
    text = "let café = \"naïve\"\r\n" * 2000
    assert SwiftFormatCLI(executable).format_text(text) == Success(text)


def test_stderr_does_not_affect_success(fake_executable) -> None:
    executable = fake_executable("cat\necho 'warning: trailing whitespace' >&2\n")
    assert SwiftFormatCLI(executable).format_text(SOURCE) == Success(SOURCE)


def test_syntax_error_is_bad_syntax(fake_executable) -> None:
    executable = fake_executable(
        "cat > /dev/null\necho '<stdin>:1:1: error: fatal error: invalid Swift syntax' >&2\nexit 1\n"
    )
    outcome = SwiftFormatCLI(executable).format_text("struct {")
    assert isinstance(outcome, BadSyntax)


def test_other_failure_is_unknown(fake_executable) -> None:
    executable = fake_executable("cat > /dev/null\necho 'boom' >&2\nexit 3\n")
    outcome = SwiftFormatCLI(executable).format_text(SOURCE)
    assert isinstance(outcome, UnknownFailure)
    assert "status 3" in outcome.message
    assert "boom" in outcome.message


def test_cancellation_kills_the_process(fake_executable) -> None:
    executable = fake_executable("exec sleep 30\n")
    cancel = threading.Event()
    timer = threading.Timer(0.3, cancel.set)
    timer.start()
    started = time.monotonic()
    try:
        outcome = SwiftFormatCLI(executable).format_text(SOURCE, cancel_event=cancel)
    finally:
        timer.cancel()
    assert outcome == Cancelled()
    assert time.monotonic() - started < 10


def test_already_cancelled_does_not_launch(tmp_path: Path, fake_executable) -> None:
    marker = tmp_path / "launched"
    executable = fake_executable(f"touch '{marker}'\ncat\n")
    cancel = threading.Event()
    cancel.set()
    assert SwiftFormatCLI(executable).format_text(SOURCE, cancel_event=cancel) == Cancelled()
    assert not marker.exists()


def _configuration_argument(args_file: Path) -> str | None:
    args = args_file.read_text(encoding="utf-8").splitlines()
    if "--configuration" not in args:
        return None
    return args[args.index("--configuration") + 1]


def test_inline_configuration_uses_temporary_file(project: Project, recording_executable) -> None:
    executable, args_file, config_file = recording_executable
    inline = '{\n  "lineLength" : 80,\n  "indentation" : {"tabs" : 1}\n}'
    settings = SettingsState(use_custom_configuration=True, config=inline)

    outcome = SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project)

    assert outcome == Success(SOURCE)
    assert args_file.read_text(encoding="utf-8").splitlines()[:3] == list(FORMAT_ARGUMENTS)
    temp_path = _configuration_argument(args_file)
    assert temp_path is not None
    assert config_file.read_text(encoding="utf-8") == inline
    assert not Path(temp_path).exists()


def test_project_file_configuration_is_passed_directly(project: Project, recording_executable) -> None:
    executable, args_file, config_file = recording_executable
    config_path = project.metadata_path / ".swift-format"
    config_path.write_text('{"lineLength": 60}', encoding="utf-8")
    settings = SettingsState(use_custom_configuration=True, config=".idea")

    SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project)

    assert _configuration_argument(args_file) == str(config_path)
    assert config_path.exists()


def test_missing_project_file_runs_with_defaults(project: Project, recording_executable) -> None:
    executable, args_file, _ = recording_executable
    settings = SettingsState(use_custom_configuration=True, config=".idea")
    SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project)
    assert _configuration_argument(args_file) is None


def test_excluded_folder_runs_with_defaults(project: Project, recording_executable) -> None:
    executable, args_file, _ = recording_executable
    (project.root / "build" / ".swift-format").write_text("{}", encoding="utf-8")
    settings = SettingsState(use_custom_configuration=True, config="build")
    outcome = SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project)
    assert outcome == Success(SOURCE)
    assert _configuration_argument(args_file) is None


def test_custom_configuration_disabled(project: Project, recording_executable) -> None:
    executable, args_file, _ = recording_executable
    settings = SettingsState(use_custom_configuration=False, config='{"lineLength": 80}')
    SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project)
    assert _configuration_argument(args_file) is None


def test_concurrent_inline_configurations_do_not_mix(project: Project, fake_executable) -> None:
    # Echo back whichever configuration file this particular run was handed.
    executable = fake_executable(
        'cfg=""\nprev=""\n'
        'for arg in "$@"; do\n'
        '  if [ "$prev" = "--configuration" ]; then cfg="$arg"; fi\n'
        '  prev="$arg"\n'
        "done\n"
        "cat > /dev/null\n"
        'cat "$cfg"\n'
    )
    cli = SwiftFormatCLI(executable)
    configs = [f'{{"lineLength": {100 + index}}}' for index in range(8)]

    def _run(config: str):
        settings = SettingsState(use_custom_configuration=True, config=config)
        return cli.format_with_settings(SOURCE, settings, project)

    with ThreadPoolExecutor(max_workers=4) as pool:
        outcomes = list(pool.map(_run, configs))

    assert outcomes == [Success(config) for config in configs]


def test_cancellation_removes_temporary_configuration(project: Project, tmp_path: Path, fake_executable) -> None:
    seen = tmp_path / "config-path.txt"
    executable = fake_executable(
        'prev=""\n'
        'for arg in "$@"; do\n'
        f'  if [ "$prev" = "--configuration" ]; then printf "%s" "$arg" > "{seen}"; fi\n'
        '  prev="$arg"\n'
        "done\n"
        "exec sleep 30\n"
    )
    settings = SettingsState(use_custom_configuration=True, config='{"lineLength": 80}')
    cancel = threading.Event()

    def _cancel_once_started() -> None:
        deadline = time.monotonic() + 10
        while not seen.exists() and time.monotonic() < deadline:
            time.sleep(0.02)
        cancel.set()

    canceller = threading.Thread(target=_cancel_once_started)
    canceller.start()
    try:
        outcome = SwiftFormatCLI(executable).format_with_settings(SOURCE, settings, project, cancel_event=cancel)
    finally:
        canceller.join()

    assert outcome == Cancelled()
    temp_path = Path(seen.read_text(encoding="utf-8"))
    assert temp_path.name.startswith(".swift-format")
    assert not temp_path.exists()
