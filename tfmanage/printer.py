"""Coloured, consistently prefixed console messages."""

from __future__ import annotations

import os
import re
import sys

RESET = "\033[0m"
RED = "\033[31m"
GREEN = "\033[32m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
GRAY = "\033[30;1m"

CHECK_MARK = "\u2713"
CROSS_MARK = "\u2717"

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def _emphasis(colour: str, text: str) -> str:
    return f"{colour}{text}{RESET}"


def add_emphasis_blue(text: str) -> str:
    """Wrap ``text`` in blue ANSI codes."""
    return _emphasis(BLUE, text)


def add_emphasis_red(text: str) -> str:
    """Wrap ``text`` in red ANSI codes."""
    return _emphasis(RED, text)


def add_emphasis_green(text: str) -> str:
    """Wrap ``text`` in green ANSI codes."""
    return _emphasis(GREEN, text)


def add_emphasis_magenta(text: str) -> str:
    """Wrap ``text`` in magenta ANSI codes."""
    return _emphasis(MAGENTA, text)


def add_emphasis_gray(text: str) -> str:
    """Wrap ``text`` in bold-black (gray) ANSI codes."""
    return _emphasis(GRAY, text)


def entrypoint_script() -> str:
    """Return the base name of the running executable, or ``tf``."""
    if sys.argv:
        return os.path.basename(sys.argv[0])
    return "tf"


def info(message: str) -> None:
    """Print an informational message to stderr."""
    prefix = add_emphasis_gray(f"[{entrypoint_script()}]")
    sys.stderr.write(f"{prefix} {message}\n")


def error(message: str) -> None:
    """Print an error message to stderr."""
    prefix = add_emphasis_red(f"[{entrypoint_script()}]")
    sys.stderr.write(f"{prefix} {message}\n")


def debug(message: str) -> None:
    """Print a debug message to stderr when ``TFM_DEBUG`` is set."""
    if os.environ.get("TFM_DEBUG"):
        sys.stderr.write(f"[DEBUG] {message}\n")


def strip_ansi_codes(text: str) -> str:
    """Remove ANSI colour escape sequences from ``text``."""
    return _ANSI_RE.sub("", text)


def visual_length(text: str) -> int:
    """Length of ``text`` as displayed, ignoring ANSI codes."""
    return len(strip_ansi_codes(text))