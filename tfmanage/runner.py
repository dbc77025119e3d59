"""Running shell commands and native checks with status reporting."""

from __future__ import annotations

import os
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import IO, Callable, List, Optional, Sequence

from .printer import (
    CHECK_MARK,
    CROSS_MARK,
    add_emphasis_blue,
    add_emphasis_gray,
    add_emphasis_green,
    add_emphasis_red,
    debug,
    entrypoint_script,
    error,
    info,
    visual_length,
)

_TOTAL_WIDTH = 120
_STATUS_WIDTH = 5


@dataclass
class CmdFlags:
    """Options controlling how a command is run and reported."""

    strict: bool = False
    print_cmd: bool = False
    decorate_output: bool = False
    print_output: bool = True
    print_message: bool = True
    print_status: bool = True
    print_outcome: bool = False
    strict_message: str = "aborting..."
    no_strict_message: str = "continuing..."
    valid_exit_codes: Sequence[int] = (0,)


@dataclass
class CmdResult:
    """Outcome of a command or native check."""

    exit_code: int
    success: bool
    output: str = ""
    error: str = ""


def _exit_code(returncode: int) -> int:
    # Signal-terminated processes report -1, as a killed process has no exit status.
    return -1 if returncode < 0 else returncode


def _result(exit_code: int, flags: CmdFlags, output: str = "", err: str = "") -> CmdResult:
    return CmdResult(
        exit_code=exit_code,
        success=exit_code in flags.valid_exit_codes,
        output=output,
        error=err,
    )


def _pump(stream: IO[bytes], tag: str, collected: List[str], lock: threading.Lock) -> None:
    for raw in stream:
        line = raw.rstrip(b"\n").removesuffix(b"\r").decode("utf-8", errors="replace")
        collected.append(line + "\n")
        with lock:
            print(f"{tag} {line}", flush=True)


def _run_decorated(command: str, flags: CmdFlags) -> CmdResult:
    try:
        proc = subprocess.Popen(
            ["sh", "-c", command],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as exc:
        return CmdResult(exit_code=1, success=False, error=str(exc))

    out_lines: List[str] = []
    err_lines: List[str] = []
    lock = threading.Lock()
    readers = [
        threading.Thread(
            target=_pump,
            args=(proc.stdout, add_emphasis_blue("[cmd]"), out_lines, lock),
            daemon=True,
        ),
        threading.Thread(
            target=_pump,
            args=(proc.stderr, add_emphasis_red("[err]"), err_lines, lock),
            daemon=True,
        ),
    ]
    for reader in readers:
        reader.start()
    returncode = proc.wait()
    for reader in readers:
        reader.join()
    proc.stdout.close()
    proc.stderr.close()
    return _result(_exit_code(returncode), flags, "".join(out_lines), "".join(err_lines))


def _run_plain(command: str, flags: CmdFlags) -> CmdResult:
    stream = None if flags.print_output else subprocess.DEVNULL
    try:
        completed = subprocess.run(
            ["sh", "-c", command], stdin=stream, stdout=stream, stderr=stream
        )
    except OSError:
        return _result(1, flags)
    return _result(_exit_code(completed.returncode), flags)


def _exec_system_command(command: str, flags: CmdFlags) -> CmdResult:
    debug(f"Executing command: {command}")
    if not command.strip():
        return CmdResult(exit_code=1, success=False, error="empty command")
    debug(f"Using shell: sh -c '{command}'")
    if flags.print_output and flags.decorate_output:
        return _run_decorated(command, flags)
    return _run_plain(command, flags)


def run_cmd(
    command: str,
    message: str,
    flags: Optional[CmdFlags] = None,
    fail_message: Optional[str] = None,
) -> CmdResult:
    """Run ``command`` through ``sh -c`` and report its status.

    In strict mode a failure raises ``SystemExit`` with the command's exit code.
    """
    flags = flags or CmdFlags()
    if flags.print_message:
        info(message)
    if flags.print_cmd:
        info(command)
    result = _exec_system_command(command, flags)
    print_status(message, result, flags, fail_message)
    return result


def run_cmd_silent(command: str, message: str, fail_message: Optional[str] = None) -> CmdResult:
    """Run a command with no output and no status line."""
    flags = CmdFlags(
        print_output=False, print_message=False, print_status=False, print_outcome=False
    )
    return run_cmd(command, message, flags, fail_message)


def run_cmd_strict(command: str, message: str, fail_message: Optional[str] = None) -> CmdResult:
    """Run a command quietly, print its status and exit on failure."""
    flags = CmdFlags(
        strict=True, print_output=False, print_message=False, print_outcome=False
    )
    return run_cmd(command, message, flags, fail_message)


def run_cmd_silent_strict(
    command: str, message: str, fail_message: Optional[str] = None
) -> CmdResult:
    """Run a command silently and exit on failure."""
    flags = CmdFlags(
        strict=True,
        print_output=False,
        print_message=False,
        print_status=False,
        print_outcome=False,
    )
    return run_cmd(command, message, flags, fail_message)


def run_cmd_interactive(
    command: str, message: str, fail_message: Optional[str] = None
) -> CmdResult:
    """Run a command attached to the terminal so it can read user input."""
    flags = CmdFlags(decorate_output=False, print_output=True)
    return run_cmd(command, message, flags, fail_message)


def run_native(
    func: Callable[[], CmdResult],
    message: str,
    flags: Optional[CmdFlags] = None,
    fail_message: Optional[str] = None,
) -> CmdResult:
    """Run an in-process check and report its status like a command."""
    flags = flags or CmdFlags()
    if flags.print_message:
        info(message)
    result = func()
    print_status(message, result, flags, fail_message)
    return result


def check_dir(path: str) -> CmdResult:
    """Succeed if ``path`` is an existing directory."""
    debug(f"Native directory check: {path}")
    if os.path.isdir(path):
        return CmdResult(0, True, output=f"Directory exists: {path}")
    return CmdResult(1, False, error=f"Directory does not exist: {path}")


def check_file(path: str) -> CmdResult:
    """Succeed if ``path`` exists and is not a directory."""
    debug(f"Native file check: {path}")
    if os.path.exists(path) and not os.path.isdir(path):
        return CmdResult(0, True, output=f"File exists: {path}")
    return CmdResult(1, False, error=f"File does not exist: {path}")


def check_not_empty(value: str) -> CmdResult:
    """Succeed if ``value`` is a non-empty string."""
    debug(f"Native non-empty check: '{value}'")
    if value:
        return CmdResult(0, True, output=f"String is not empty: '{value}'")
    return CmdResult(1, False, error="String is empty")


def print_status(
    message: str,
    result: CmdResult,
    flags: CmdFlags,
    fail_message: Optional[str] = None,
) -> None:
    """Print a padded status line for ``result`` and handle failure."""
    if not flags.print_status:
        return

    if result.success:
        indicator = f"[ {add_emphasis_green(CHECK_MARK)} ]"
        outcome = "(done)"
    else:
        indicator = f"[ {add_emphasis_red(CROSS_MARK)} ]"
        note = flags.strict_message if flags.strict else flags.no_strict_message
        outcome = f"({add_emphasis_red(note)})"

    entrypoint = f"[{entrypoint_script()}]"
    padding = max(
        1,
        _TOTAL_WIDTH - visual_length(entrypoint) - 1 - visual_length(message) - 1 - _STATUS_WIDTH,
    )
    line = f"{add_emphasis_gray(entrypoint)} {message}{' ' * padding} {indicator}"
    if flags.print_outcome and outcome:
        line += f" {outcome}"
    print(line)
    sys.stdout.flush()

    if not result.success:
        if fail_message:
            error(fail_message)
        if flags.strict:
            raise SystemExit(result.exit_code)