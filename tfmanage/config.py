"""Loading and validating the ``.tfm.conf`` project configuration."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Optional

CONFIG_FILE_NAME = ".tfm.conf"
DEFAULT_ENV_REL_PATH = "terraform/environments"
DEFAULT_MODULE_REL_PATH = "terraform/modules"

_KEY_TO_FIELD = {
    "__tfm_repo_name": "repo_name",
    "__tfm_env_rel_path": "env_rel_path",
    "__tfm_module_rel_path": "module_rel_path",
}


class ConfigError(Exception):
    """Raised when the configuration cannot be found, read or validated."""


def _join(*parts: str) -> str:
    kept = [part for part in parts if part]
    if not kept:
        return ""
    return os.path.normpath(os.path.join(*kept))


@dataclass
class Config:
    """The tf-manage configuration of one repository."""

    repo_name: str = ""
    env_rel_path: str = DEFAULT_ENV_REL_PATH
    module_rel_path: str = DEFAULT_MODULE_REL_PATH
    project_dir: str = ""
    config_path: str = ""

    def validate(self) -> None:
        """Raise ``ConfigError`` if a required setting is empty."""
        if not self.repo_name:
            raise ConfigError("repo_name is required")
        if not self.env_rel_path:
            raise ConfigError("env_rel_path is required")
        if not self.module_rel_path:
            raise ConfigError("module_rel_path is required")

    def module_path(self) -> str:
        """Absolute path of the modules directory."""
        return _join(self.project_dir, self.module_rel_path)

    def env_path(self) -> str:
        """Absolute path of the environments directory."""
        return _join(self.project_dir, self.env_rel_path)


def find_project_dir(start: Optional[str] = None) -> str:
    """Return the nearest directory at or above ``start`` holding ``.git``."""
    directory = os.path.abspath(start if start is not None else os.getcwd())
    while True:
        if os.path.exists(os.path.join(directory, ".git")):
            return directory
        parent = os.path.dirname(directory)
        if parent == directory:
            raise ConfigError("not in a git repository")
        directory = parent


def parse_config_file(path: str, config: Config) -> Config:
    """Read shell ``export`` assignments from ``path`` on top of ``config``.

    Returns a new ``Config``; unknown keys and malformed lines are ignored.
    """
    updates = {}
    with open(path, encoding="utf-8", errors="replace") as handle:
        for raw in handle:
            line = raw.strip()
            if not line or line.startswith("#") or line.startswith("//"):
                continue
            line = line.removeprefix("export ")
            key, sep, value = line.partition("=")
            if not sep:
                continue
            field = _KEY_TO_FIELD.get(key.strip())
            if field is not None:
                updates[field] = value.strip().strip("'\"")
    return dataclasses.replace(config, **updates)


def generate_config_snippet(project_dir: str) -> str:
    """Shell snippet that creates a sample ``.tfm.conf`` in ``project_dir``."""
    project_name = os.path.basename(os.path.normpath(project_dir))
    return (
        f"cat > {project_dir}/{CONFIG_FILE_NAME} <<-EOF\n"
        "#!/bin/bash\n"
        f"export __tfm_repo_name='{project_name}'\n"
        f"export __tfm_env_rel_path='{DEFAULT_ENV_REL_PATH}'\n"
        f"export __tfm_module_rel_path='{DEFAULT_MODULE_REL_PATH}'\n"
        "EOF"
    )


def load_config(start: Optional[str] = None) -> Config:
    """Locate the repository root from ``start`` and load its ``.tfm.conf``."""
    try:
        project_dir = find_project_dir(start)
    except ConfigError as exc:
        raise ConfigError(f"failed to find project directory: {exc}") from exc

    config_path = os.path.join(project_dir, CONFIG_FILE_NAME)
    config = Config(project_dir=project_dir, config_path=config_path)

    if not os.path.exists(config_path):
        raise ConfigError(
            f"config file not found at {config_path}. Create it with:\n"
            f"{generate_config_snippet(project_dir)}"
        )

    try:
        config = parse_config_file(config_path, config)
    except OSError as exc:
        raise ConfigError(f"failed to parse config file {config_path}: {exc}") from exc

    try:
        config.validate()
    except ConfigError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    return config