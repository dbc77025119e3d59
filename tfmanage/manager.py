"""Running terraform actions with tf-manage conventions."""

from __future__ import annotations

import os
from typing import Mapping, NamedTuple, Optional, Tuple

from .command import (
    Command,
    ExecMode,
    Paths,
    compute_paths,
    detect_exec_mode,
    generate_workspace,
    tfm_extra_vars,
)
from .config import Config
from .printer import add_emphasis_blue, add_emphasis_red, error, info
from .runner import (
    CmdFlags,
    check_dir,
    check_file,
    check_not_empty,
    run_cmd,
    run_cmd_interactive,
    run_native,
)

# Actions that run before a workspace can (or needs to) be selected.
_NO_WORKSPACE_ACTIONS = frozenset({"workspace", "init", "fmt"})

_APPLY_NOTICES = ("Executing terraform apply", "This will affect infrastructure resources.")

# action -> (base command, status message, failure message, error text)
_SIMPLE_ACTIONS = {
    "init": (
        "terraform init",
        "Initializing terraform",
        "Terraform init failed",
        "terraform init failed",
    ),
    "output": (
        "terraform output",
        "Getting terraform outputs",
        "Terraform output failed",
        "terraform output failed",
    ),
    "get": (
        "terraform get",
        "Getting terraform modules",
        "Terraform get failed",
        "terraform get failed",
    ),
    "workspace": (
        "terraform workspace",
        "Managing terraform workspace",
        "Terraform workspace command failed",
        "terraform workspace command failed",
    ),
    "providers": (
        "terraform providers",
        "Managing terraform providers",
        "Terraform providers command failed",
        "terraform providers command failed",
    ),
    "taint": (
        "terraform taint",
        "Tainting terraform resource",
        "Terraform taint failed",
        "terraform taint failed",
    ),
    "untaint": (
        "terraform untaint",
        "Untainting terraform resource",
        "Terraform untaint failed",
        "terraform untaint failed",
    ),
    "state": (
        "terraform state",
        "Managing terraform state",
        "Terraform state command failed",
        "terraform state command failed",
    ),
    "validate": (
        "terraform validate",
        "Validating terraform configuration",
        "Terraform validate failed",
        "terraform validate failed",
    ),
    "fmt": (
        "terraform fmt",
        "Formatting terraform files",
        "Terraform fmt failed",
        "terraform fmt failed",
    ),
    "format": (
        "terraform fmt",
        "Formatting terraform files",
        "Terraform fmt failed",
        "terraform fmt failed",
    ),
}


class TerraformError(Exception):
    """Raised when validation or a terraform action fails."""


class _Action(NamedTuple):
    """A fully resolved terraform invocation."""

    command: str
    message: str
    fail_message: str
    error: str
    interactive: bool = False
    print_message: bool = True
    notices: Tuple[str, ...] = ()


class Manager:
    """Validates tf-manage commands and runs the matching terraform action."""

    def __init__(self, config: Config, env: Optional[Mapping[str, str]] = None) -> None:
        self.config = config
        self._env = env

    @property
    def exec_mode(self) -> ExecMode:
        """The current execution mode, read from the environment."""
        return detect_exec_mode(self._env)

    def execute(self, command: Command) -> None:
        """Validate ``command``, select its workspace and run its action."""
        info(f"Detected exec mode: {self.exec_mode.value}")

        self.validate_command(command)
        paths = compute_paths(self.config, command)
        workspace_name = generate_workspace(command, self.config.repo_name)

        info("*** Terraform ***")
        info(f'Running from "{paths.module_path}"')

        try:
            os.chdir(paths.module_path)
        except OSError as exc:
            raise TerraformError(
                f"failed to change to module directory {paths.module_path}: {exc}"
            ) from exc

        info(f"Executing terraform {command.action}")

        if command.action not in _NO_WORKSPACE_ACTIONS:
            try:
                self.ensure_workspace(workspace_name)
            except TerraformError as exc:
                raise TerraformError(f"failed to ensure workspace: {exc}") from exc

        self.execute_action(command, paths)

    def validate_command(self, command: Command) -> None:
        """Check that the product, repo, module, environment and var file exist."""
        flags = CmdFlags(print_output=False, print_message=False)

        product_path = os.path.join(self.config.env_path(), command.product)
        result = run_native(
            lambda: check_dir(product_path),
            f"Checking product {add_emphasis_blue(command.product)} is valid",
            flags,
            f'Product path "{add_emphasis_blue(product_path)}" was not found!',
        )
        if not result.success:
            raise TerraformError("product validation failed")

        repo_name = self.config.repo_name
        if not repo_name:
            error("Repo name is empty!")
            raise TerraformError("repo validation failed")
        result = run_native(
            lambda: check_not_empty(repo_name),
            f"Checking repo {add_emphasis_blue(repo_name)} is valid",
            flags,
            "Component is empty. Make sure the first argument is set to a non-null string",
        )
        if not result.success:
            raise TerraformError("repo validation failed")

        module_path = os.path.join(self.config.module_path(), command.module)
        result = run_native(
            lambda: check_dir(module_path),
            f"Checking module {add_emphasis_blue(command.module)} exists",
            flags,
            f'Module path "{add_emphasis_blue(module_path)}" was not found!',
        )
        if not result.success:
            raise TerraformError("module validation failed")

        env_path = os.path.join(self.config.env_path(), command.product, command.env)
        result = run_native(
            lambda: check_dir(env_path),
            f"Checking environment {add_emphasis_blue(command.env)} exists",
            flags,
            f'Environment path "{add_emphasis_blue(env_path)}" was not found!',
        )
        if not result.success:
            raise TerraformError("environment validation failed")

        var_file = os.path.join(env_path, command.module, f"{command.module_instance}.tfvars")
        result = run_native(
            lambda: check_file(var_file),
            f"Checking config {add_emphasis_blue(command.module_instance)}.tfvars exists",
            flags,
            f'Config file "{add_emphasis_blue(var_file)}" was not found!',
        )
        if not result.success:
            raise TerraformError("config validation failed")

    def ensure_workspace(self, workspace_name: str) -> None:
        """Create ``workspace_name`` if missing and select it via ``TF_WORKSPACE``."""
        pattern = workspace_name.replace(".", "\\.") + "$"
        result = run_cmd(
            f"terraform workspace list | grep '{pattern}'",
            f"Checking workspace {add_emphasis_blue(workspace_name)} exists",
            CmdFlags(print_output=False, print_message=False, print_status=True),
        )

        if not result.success:
            result = run_cmd(
                f"terraform workspace new {workspace_name}",
                f"Creating workspace {add_emphasis_red(workspace_name)}",
                CmdFlags(print_message=True, print_status=True),
                "Could not create workspace!",
            )
            if not result.success:
                raise TerraformError(f"failed to create workspace {workspace_name}")

        os.environ["TF_WORKSPACE"] = workspace_name
        info(f"Selecting workspace {add_emphasis_blue(workspace_name)}")

    def build_action(self, command: Command, paths: Paths) -> _Action:
        """Resolve the shell command and reporting details for ``command.action``."""
        action = command.action
        repo_name = self.config.repo_name
        var_file = f'-var-file="{paths.var_file}"'

        if action in _SIMPLE_ACTIONS:
            base, message, fail_message, err = _SIMPLE_ACTIONS[action]
            spec = _Action(base, message, fail_message, err)
        elif action == "plan":
            extra = tfm_extra_vars(command, repo_name)
            spec = _Action(
                f'terraform plan {var_file} -out="{paths.plan_file}" {extra}',
                "Planning terraform changes",
                "Terraform plan failed",
                "terraform plan failed",
            )
        elif action == "refresh":
            extra = tfm_extra_vars(command, repo_name)
            spec = _Action(
                f"terraform refresh {var_file} {extra}",
                "Refreshing terraform state",
                "Terraform refresh failed",
                "terraform refresh failed",
            )
        elif action in ("apply", "import", "destroy"):
            spec = self._build_attended_action(command, var_file)
        elif action == "apply_plan":
            spec = _Action(
                f'terraform apply "{paths.plan_file}"',
                "Applying terraform changes",
                "Terraform apply failed",
                "terraform apply failed",
                print_message=False,
                notices=_APPLY_NOTICES,
            )
        elif action == "show":
            if os.path.exists(paths.plan_file):
                base = f'terraform show "{paths.plan_file}"'
            else:
                base = "terraform show"
            spec = _Action(
                base,
                "Showing terraform state/plan",
                "Terraform show failed",
                "terraform show failed",
            )
        else:
            raise TerraformError(f"unsupported terraform action: {action}")

        if command.action_flags:
            spec = spec._replace(command=f"{spec.command} {command.action_flags}")
        return spec

    def _build_attended_action(self, command: Command, var_file: str) -> _Action:
        action = command.action
        extra = tfm_extra_vars(command, self.config.repo_name)
        unattended = self.exec_mode is ExecMode.UNATTENDED
        shell = f"terraform {action} {var_file} {extra}"

        if action == "destroy":
            if unattended:
                shell += " -auto-approve"
            message = "Destroying terraform resources"
            fail_message = "Terraform destroy failed"
            notices = (
                "Executing terraform destroy",
                "This will DESTROY infrastructure resources.",
            )
        else:
            if unattended:
                shell += " -input=false -auto-approve"
            if action == "apply":
                message = "Applying terraform changes"
                notices = _APPLY_NOTICES
            else:
                message = "Importing terraform resource"
                notices = (
                    "Executing terraform import",
                    "This will affect infrastructure resources.",
                )
            fail_message = f"Terraform {action} failed"

        return _Action(
            shell,
            message,
            fail_message,
            f"terraform {action} failed",
            interactive=not unattended,
            print_message=not unattended,
            notices=notices,
        )

    def execute_action(self, command: Command, paths: Paths) -> None:
        """Run the terraform action of ``command``; raise on failure."""
        spec = self.build_action(command, paths)
        for notice in spec.notices:
            info(notice)

        if spec.interactive:
            result = run_cmd_interactive(spec.command, spec.message, spec.fail_message)
        else:
            result = run_cmd(
                spec.command,
                spec.message,
                CmdFlags(print_message=spec.print_message),
                spec.fail_message,
            )

        if not result.success:
            raise TerraformError(spec.error)