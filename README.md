# tfmanage

A small wrapper around `terraform` that enforces a consistent layout for
modules, environments and workspaces. Each run checks that the product,
module, environment and variable file exist, selects or creates a workspace
named after them, and then runs the requested terraform action from the
module directory. Commands are run through `sh -c`, so `sh` and `terraform`
must be on the `PATH`.

## Installation

```
pip install .
```

This installs the `tf` command. The same entry point can also be started
with `python -m tfmanage.cli`.

## Repository layout

The command must be run inside a git repository. The nearest directory at or
above the current one that holds `.git` is taken as the project root, and it
must contain a `.tfm.conf` file written in shell `export` syntax:

```
#!/bin/bash
export __tfm_repo_name='my-repo'
export __tfm_env_rel_path='terraform/environments'
export __tfm_module_rel_path='terraform/modules'
```

`__tfm_repo_name` is required. The two path settings default to the values
shown above. Blank lines, lines starting with `#` or `//`, and unknown keys
are ignored, and surrounding quotes are stripped from values.

With that configuration the expected tree is:

```
terraform/modules/<module>/
terraform/environments/<product>/<env>/<module>/<module_instance>.tfvars
```

If the file is missing, the error message includes a ready-made shell
snippet that creates it.

## Usage

```
tf <product> <module> <env> <module_instance> <action> [workspace=name]
```

Examples:

```
tf project1 sample_module dev instance_x init
tf project1 sample_module dev instance_x plan
tf project1 sample_module dev instance_x apply
tf project1 sample_module dev instance_x destroy
tf project1 sample_module dev instance_x "plan -refresh=false"
```

The action argument may carry extra terraform flags after the action name,
quoted as one argument; they are appended to the terraform command.

Supported actions: `init`, `plan`, `apply`, `apply_plan`, `destroy`,
`output`, `get`, `workspace`, `providers`, `import`, `taint`, `untaint`,
`state`, `refresh`, `validate`, `fmt` (or `format`) and `show`. Any other
action is reported as unsupported.

- `plan` writes its plan to `<module_instance>.tfvars.tfplan` next to the
  `.tfvars` file; `apply_plan` applies that file.
- `show` shows the plan file when it exists, otherwise the current state.
- `plan`, `apply`, `destroy`, `import` and `refresh` receive `-var-file` for
  the instance's `.tfvars` and the variables `tfm_product`, `tfm_repo`,
  `tfm_module`, `tfm_env` and `tfm_module_instance`.

## Workspaces

The workspace is named `<product>.<repo>.<module>.<env>.<module_instance>`,
with any `/` in the environment replaced by `__`. Before every action except
`workspace`, `init` and `fmt`, it is looked up with `terraform workspace
list`, created with `terraform workspace new` if missing, and selected by
setting `TF_WORKSPACE`.

A sixth argument of the form `workspace=name` is accepted on the command
line, but the workspace used is always the generated name above.

## Execution mode

By default the tool runs in *operator* mode, where `apply`, `destroy` and
`import` are attached to the terminal so terraform can prompt. It switches
to *unattended* mode when `TF_EXEC_MODE_OVERRIDE` is set to any non-empty
value or a CI system is detected (GitHub Actions, GitLab CI, CircleCI,
Travis CI, Azure Pipelines, Jenkins, Bamboo, TeamCity, Buildkite, Drone,
AWS CodeBuild, a generic `CI=true` / `CI=1`, or `USER=jenkins`). In
unattended mode `apply` and `import` get `-input=false -auto-approve` and
`destroy` gets `-auto-approve`.

Set `TFM_DEBUG` to any value to print the shell commands being run.

## Flags and exit status

```
tf --help
tf --version
```

Running `tf` with no arguments prints the usage line. On a usage,
configuration, validation or terraform failure, an error is printed to
standard error and `tf` exits with status 1.

## Using it from Python

- `tfmanage.config.load_config()` finds the project root and returns a
  `Config`, raising `ConfigError` on problems.
- `tfmanage.cli.parse_command(args)` turns positional arguments into a
  `Command`.
- `tfmanage.manager.Manager(config).execute(command)` validates and runs it,
  raising `TerraformError` on failure.
- `tfmanage.command` holds the helpers for paths, workspace names,
  `detect_exec_mode` and `is_running_in_ci`.

## What it does not do

It does not install or manage terraform itself, does not lock state or
serialise concurrent runs, and does not honour a workspace override given on
the command line.