import os

import pytest

from tfmanage.config import (
    Config,
    ConfigError,
    find_project_dir,
    generate_config_snippet,
    load_config,
    parse_config_file,
)


def _make_repo(root):
    (root / ".git").mkdir()
    return root


def _write_conf(root, text):
    path = root / ".tfm.conf"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = Config()
    assert config.env_rel_path == "terraform/environments"
    assert config.module_rel_path == "terraform/modules"
    assert config.repo_name == ""


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({}, "repo_name is required"),
        ({"repo_name": "r", "env_rel_path": ""}, "env_rel_path is required"),
        ({"repo_name": "r", "module_rel_path": ""}, "module_rel_path is required"),
    ],
)
def test_validate_errors(kwargs, message):
    with pytest.raises(ConfigError, match=message):
        Config(**kwargs).validate()


def test_validate_accepts_complete_config():
    config = Config(repo_name="infra")
    config.validate()
    assert config.repo_name == "infra"


def test_paths_join_project_dir(tmp_path):
    config = Config(repo_name="r", project_dir=str(tmp_path))
    assert config.module_path() == str(tmp_path / "terraform" / "modules")
    assert config.env_path() == str(tmp_path / "terraform" / "environments")


def test_find_project_dir_walks_up(tmp_path):
    _make_repo(tmp_path)
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_project_dir(str(nested)) == str(tmp_path)
    assert find_project_dir(str(tmp_path)) == str(tmp_path)


def test_find_project_dir_accepts_git_file(tmp_path):
    (tmp_path / ".git").write_text("gitdir: elsewhere")
    assert find_project_dir(str(tmp_path)) == str(tmp_path)


def test_find_project_dir_outside_repo(tmp_path):
    with pytest.raises(ConfigError, match="not in a git repository"):
        find_project_dir(str(tmp_path))


def test_parse_config_file(tmp_path):
    path = _write_conf(
        tmp_path,
        "#!/bin/bash\n"
        "# a comment\n"
        "// another comment\n"
        "\n"
        "export __tfm_repo_name='my-repo'\n"
        '__tfm_env_rel_path="envs/a=b"\n'
        "  export __tfm_module_rel_path = mods  \n"
        "export __other=ignored\n"
        "no assignment here\n",
    )
    config = parse_config_file(str(path), Config(project_dir="/p"))
    assert config.repo_name == "my-repo"
    assert config.env_rel_path == "envs/a=b"
    assert config.module_rel_path == "mods"
    assert config.project_dir == "/p"


def test_parse_config_file_keeps_unset_values(tmp_path):
    path = _write_conf(tmp_path, "export __tfm_repo_name=only\n")
    original = Config()
    config = parse_config_file(str(path), original)
    assert config.repo_name == "only"
    assert config.env_rel_path == original.env_rel_path
    assert original.repo_name == ""


def test_parse_config_file_missing(tmp_path):
    with pytest.raises(OSError):
        parse_config_file(str(tmp_path / "missing.conf"), Config())


def test_generate_config_snippet(tmp_path):
    project = tmp_path / "proj"
    snippet = generate_config_snippet(str(project))
    lines = snippet.splitlines()
    assert lines[0] == f"cat > {project}/.tfm.conf <<-EOF"
    assert "export __tfm_repo_name='proj'" in lines
    assert "export __tfm_env_rel_path='terraform/environments'" in lines
    assert "export __tfm_module_rel_path='terraform/modules'" in lines
    assert lines[-1] == "EOF"


def test_snippet_round_trips_through_parser(tmp_path):
    _make_repo(tmp_path)
    body = "\n".join(generate_config_snippet(str(tmp_path)).splitlines()[1:-1])
    _write_conf(tmp_path, body + "\n")
    config = load_config(str(tmp_path))
    assert config.repo_name == os.path.basename(str(tmp_path))
    assert config.env_rel_path == "terraform/environments"


def test_load_config(tmp_path):
    _make_repo(tmp_path)
    _write_conf(tmp_path, "export __tfm_repo_name='infra'\n")
    sub = tmp_path / "terraform"
    sub.mkdir()
    config = load_config(str(sub))
    assert config.repo_name == "infra"
    assert config.project_dir == str(tmp_path)
    assert config.config_path == str(tmp_path / ".tfm.conf")


def test_load_config_missing_file(tmp_path):
    _make_repo(tmp_path)
    with pytest.raises(ConfigError, match="config file not found") as info:
        load_config(str(tmp_path))
    assert "export __tfm_repo_name=" in str(info.value)


def test_load_config_invalid(tmp_path):
    _make_repo(tmp_path)
    _write_conf(tmp_path, "export __tfm_env_rel_path='x'\n")
    with pytest.raises(ConfigError, match="invalid configuration: repo_name is required"):
        load_config(str(tmp_path))


def test_load_config_empty_env_path(tmp_path):
    _make_repo(tmp_path)
    _write_conf(tmp_path, "export __tfm_repo_name=r\nexport __tfm_env_rel_path=''\n")
    with pytest.raises(ConfigError, match="env_rel_path is required"):
        load_config(str(tmp_path))


def test_load_config_outside_repo(tmp_path):
    with pytest.raises(ConfigError, match="failed to find project directory"):
        load_config(str(tmp_path))