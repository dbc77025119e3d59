[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tfmanage"
version = "0.1.0"
description = "Terraform workspace manager that runs terraform with per-product, per-environment conventions"
requires-python = ">=3.10"
dependencies = []
keywords = ["terraform", "workspace", "infrastructure", "devops", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tf = "tfmanage.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tfmanage"]

[tool.pytest.ini_options]
addopts = "-ra"
