"""Command-line entry point: argument parsing, help and version output."""

from __future__ import annotations

import sys
from typing import List, Optional, Sequence

from .command import Command
from .config import ConfigError, load_config
from .manager import Manager, TerraformError
from .printer import error

VERSION = "dev"
COMMIT = "none"
DATE = "unknown"
BUILT_BY = "unknown"

_HELP_TEXT = """\
tf-manage2 - Terraform workspace manager

USAGE:
    tf <project> <module> <env> <module_instance> <action> [workspace]

ARGUMENTS:
    project           Project/product name
    module            Terraform module name
    env               Environment (dev, staging, prod, etc.)
    module_instance   Module instance identifier
    action            Terraform action (init, plan, apply, destroy, etc.)
    workspace         Optional workspace override (format: workspace=name)

EXAMPLES:
    tf project1 sample_module dev instance_x init
    tf project1 sample_module dev instance_x plan
    tf project1 sample_module dev instance_x apply
    tf project1 sample_module dev instance_x destroy
    tf project1 sample_module dev instance_x plan workspace=custom

FLAGS:
    -h, --help        Show this help message
    -v, --version     Show version information

ENVIRONMENT VARIABLES:
    TF_EXEC_MODE_OVERRIDE=1    Force unattended mode (auto-approve)
"""


class UsageError(Exception):
    """Raised when the command line is malformed."""


def parse_command(args: Sequence[str]) -> Command:
    """Build a ``Command`` from positional arguments.

    The fifth argument holds the action followed by optional terraform flags;
    an optional sixth argument overrides the workspace (``workspace=name``).
    """
    if len(args) < 5:
        raise UsageError("insufficient arguments")
    if len(args) > 6:
        raise UsageError("too many arguments")

    product, module, env, module_instance, action_raw = args[:5]
    action, *flags = action_raw.split() or [""]
    workspace = args[5].removeprefix("workspace=") if len(args) == 6 else ""

    return Command(
        product=product,
        module=module,
        env=env,
        module_instance=module_instance,
        action=action,
        action_flags=" ".join(flags),
        workspace=workspace,
    )


def version_text(
    version: str = VERSION,
    commit: str = COMMIT,
    date: str = DATE,
    built_by: str = BUILT_BY,
) -> str:
    """The text printed for ``--version``; unset build details are omitted."""
    lines = [f"tf-manage2 version {version}"]
    if commit != "none":
        lines.append(f"  commit: {commit}")
    if date != "unknown":
        lines.append(f"  built: {date}")
    if built_by != "unknown":
        lines.append(f"  built by: {built_by}")
    return "\n".join(lines) + "\n"


def help_text() -> str:
    """The text printed for ``--help``."""
    return _HELP_TEXT


def _usage(program: str) -> str:
    return (
        f"Usage: {program} <product> <module> <env> <module_instance> "
        "<action> [workspace]"
    )


def execute(argv: Optional[Sequence[str]] = None) -> None:
    """Run one tf-manage invocation; ``argv`` excludes the program name."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)

    if not args:
        program = sys.argv[0] if sys.argv else "tf"
        raise UsageError(_usage(program))

    if len(args) == 1 and args[0] in ("--version", "-v"):
        sys.stdout.write(version_text())
        return

    if len(args) == 1 and args[0] in ("--help", "-h"):
        sys.stdout.write(help_text())
        return

    config = load_config()
    command = parse_command(args)
    Manager(config).execute(command)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point; returns the process exit status."""
    try:
        execute(argv)
    except (UsageError, ConfigError, TerraformError) as exc:
        error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())