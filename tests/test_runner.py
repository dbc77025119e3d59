import sys

import pytest

from tfmanage import runner
from tfmanage.printer import CHECK_MARK, CROSS_MARK, strip_ansi_codes


@pytest.fixture(autouse=True)
def argv_tf(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["tf"])


def test_default_flags():
    flags = runner.CmdFlags()
    assert flags.print_output and flags.print_message and flags.print_status
    assert not flags.strict and not flags.print_outcome
    assert flags.strict_message == "aborting..."
    assert flags.no_strict_message == "continuing..."
    assert tuple(flags.valid_exit_codes) == (0,)


def test_silent_success():
    result = runner.run_cmd_silent("true", "msg")
    assert result.exit_code == 0
    assert result.success


def test_silent_failure_reports_exit_code(capsys):
    result = runner.run_cmd_silent("exit 3", "msg")
    assert result.exit_code == 3
    assert not result.success
    assert capsys.readouterr().out == ""


def test_valid_exit_codes_extend_success():
    flags = runner.CmdFlags(print_output=False, print_status=False, print_message=False,
                            valid_exit_codes=(0, 3))
    result = runner.run_cmd("exit 3", "msg", flags)
    assert result.exit_code == 3
    assert result.success


def test_empty_command():
    result = runner.run_cmd_silent("   ", "msg")
    assert result.exit_code == 1
    assert not result.success
    assert result.error == "empty command"


def test_decorated_output_is_captured(capsys):
    flags = runner.CmdFlags(decorate_output=True, print_status=False, print_message=False)
    result = runner.run_cmd("echo hi; echo oops >&2", "msg", flags)
    assert result.success
    assert result.output == "hi\n"
    assert result.error == "oops\n"
    out = strip_ansi_codes(capsys.readouterr().out)
    assert "[cmd] hi" in out
    assert "[err] oops" in out


def test_strict_failure_exits_with_code(capsys):
    with pytest.raises(SystemExit) as excinfo:
        runner.run_cmd_strict("exit 4", "Checking", "went wrong")
    assert excinfo.value.code == 4
    captured = capsys.readouterr()
    assert CROSS_MARK in captured.out
    assert strip_ansi_codes(captured.err) == "[tf] went wrong\n"


def test_strict_success_does_not_exit(capsys):
    result = runner.run_cmd_strict("true", "Checking")
    assert result.success
    assert CHECK_MARK in capsys.readouterr().out


def test_status_line_width_is_fixed(capsys):
    runner.print_status("msg", runner.CmdResult(0, True), runner.CmdFlags())
    line = strip_ansi_codes(capsys.readouterr().out).rstrip("\n")
    assert len(line) == 120
    assert line.startswith("[tf] msg ")


def test_status_long_message_keeps_one_space(capsys):
    message = "m" * 200
    runner.print_status(message, runner.CmdResult(0, True), runner.CmdFlags())
    line = strip_ansi_codes(capsys.readouterr().out).rstrip("\n")
    assert line == f"[tf] {message}  [ {CHECK_MARK} ]"


def test_status_outcome_done(capsys):
    flags = runner.CmdFlags(print_outcome=True)
    runner.print_status("msg", runner.CmdResult(0, True), flags)
    assert strip_ansi_codes(capsys.readouterr().out).rstrip("\n").endswith("(done)")


def test_status_outcome_continuing(capsys):
    flags = runner.CmdFlags(print_outcome=True)
    runner.print_status("msg", runner.CmdResult(1, False), flags, "failed here")
    captured = capsys.readouterr()
    assert strip_ansi_codes(captured.out).rstrip("\n").endswith("(continuing...)")
    assert "failed here" in captured.err


def test_status_disabled_prints_nothing(capsys):
    flags = runner.CmdFlags(print_status=False, strict=True)
    runner.print_status("msg", runner.CmdResult(1, False), flags, "x")
    captured = capsys.readouterr()
    assert captured.out == "" and captured.err == ""


def test_check_dir(tmp_path):
    result = runner.check_dir(str(tmp_path))
    assert result.success
    assert result.output == f"Directory exists: {tmp_path}"
    missing = runner.check_dir(str(tmp_path / "missing"))
    assert not missing.success
    assert missing.exit_code == 1
    assert missing.error == f"Directory does not exist: {tmp_path / 'missing'}"


def test_check_file(tmp_path):
    path = tmp_path / "vars.tfvars"
    path.write_text("a = 1\n")
    assert runner.check_file(str(path)).output == f"File exists: {path}"
    as_dir = runner.check_file(str(tmp_path))
    assert not as_dir.success
    assert as_dir.error == f"File does not exist: {tmp_path}"


def test_check_not_empty():
    assert runner.check_not_empty("repo").output == "String is not empty: 'repo'"
    empty = runner.check_not_empty("")
    assert not empty.success
    assert empty.error == "String is empty"


def test_run_native_prints_message_and_status(tmp_path, capsys):
    result = runner.run_native(lambda: runner.check_dir(str(tmp_path)), "Checking dir")
    assert result.success
    captured = capsys.readouterr()
    assert strip_ansi_codes(captured.err) == "[tf] Checking dir\n"
    assert CHECK_MARK in captured.out


def test_run_native_strict_failure(tmp_path):
    flags = runner.CmdFlags(strict=True, print_message=False)
    with pytest.raises(SystemExit) as excinfo:
        runner.run_native(lambda: runner.check_dir(str(tmp_path / "nope")), "msg", flags)
    assert excinfo.value.code == 1