[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mieru"
version = "2.4.0"
description = "Building blocks of a socks5 proxy: logging, metrics, congestion control, egress rules and command dispatch."
requires-python = ">=3.10"
dependencies = []
keywords = ["proxy", "socks5", "congestion-control", "cubic", "rtt", "metrics", "logging"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mieru"]

[tool.hatch.build.targets.sdist]
include = ["mieru", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
