"""Terraform command description, derived paths and execution mode."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from .config import Config


@dataclass
class Command:
    """A tf-manage invocation."""

    product: str
    module: str
    env: str
    module_instance: str
    action: str = ""
    action_flags: str = ""
    workspace: str = ""


@dataclass(frozen=True)
class Paths:
    """Filesystem locations used by a command."""

    module_path: str
    env_path: str
    module_env_path: str
    var_file: str
    plan_file: str


class ExecMode(str, Enum):
    """Whether terraform runs with an operator present or unattended."""

    OPERATOR = "operator"
    UNATTENDED = "unattended"


def _join(*parts: str) -> str:
    kept = [part for part in parts if part]
    if not kept:
        return ""
    return os.path.normpath(os.path.join(*kept))


def compute_paths(config: Config, command: Command) -> Paths:
    """Work out the module directory, var file and plan file for ``command``."""
    module_path = _join(config.module_path(), command.module)
    env_path = _join(config.env_path(), command.product, command.env)
    module_env_path = _join(env_path, command.module)
    return Paths(
        module_path=module_path,
        env_path=env_path,
        module_env_path=module_env_path,
        var_file=_join(module_env_path, f"{command.module_instance}.tfvars"),
        plan_file=_join(module_env_path, f"{command.module_instance}.tfvars.tfplan"),
    )


def generate_workspace(command: Command, repo_name: str) -> str:
    """Workspace name ``product.repo.module.env.instance``, with ``/`` in env as ``__``."""
    env = command.env.replace("/", "__")
    return ".".join(
        (command.product, repo_name, command.module, env, command.module_instance)
    )


def is_running_in_ci(env: Optional[Mapping[str, str]] = None) -> bool:
    """True if the environment looks like a known CI/CD system."""
    env = os.environ if env is None else env

    def value(name: str) -> str:
        return env.get(name, "")

    return (
        value("GITHUB_ACTIONS") == "true"
        or value("GITLAB_CI") == "true"
        or value("CIRCLECI") == "true"
        or value("TRAVIS") == "true"
        or value("TF_BUILD") == "True"
        or bool(value("JENKINS_URL"))
        or bool(value("BUILD_NUMBER"))
        or bool(value("bamboo_buildKey"))
        or bool(value("TEAMCITY_VERSION"))
        or value("BUILDKITE") == "true"
        or value("DRONE") == "true"
        or bool(value("CODEBUILD_BUILD_ID"))
        or value("CI") in ("true", "1")
        or value("USER") == "jenkins"
    )


def detect_exec_mode(env: Optional[Mapping[str, str]] = None) -> ExecMode:
    """Unattended when forced by ``TF_EXEC_MODE_OVERRIDE`` or in CI, else operator."""
    env = os.environ if env is None else env
    if env.get("TF_EXEC_MODE_OVERRIDE", ""):
        return ExecMode.UNATTENDED
    if is_running_in_ci(env):
        return ExecMode.UNATTENDED
    return ExecMode.OPERATOR


def tfm_extra_vars(command: Command, repo_name: str) -> str:
    """The ``-var`` flags that pass tf-manage metadata to terraform."""
    return (
        f"-var 'tfm_product={command.product}' "
        f"-var 'tfm_repo={repo_name}' "
        f"-var 'tfm_module={command.module}' "
        f"-var 'tfm_env={command.env}' "
        f"-var 'tfm_module_instance={command.module_instance}'"
    )