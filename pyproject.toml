[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "trafficreplay"
version = "0.1.0"
description = "Building blocks for filtering, rate-limiting, capturing and replaying HTTP traffic"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "http",
    "traffic",
    "replay",
    "capture",
    "pcap",
    "bpf",
    "rate-limiting",
    "load-testing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Testing :: Traffic Generation",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["trafficreplay"]

[tool.hatch.build.targets.sdist]
include = ["trafficreplay", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP", "SIM"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
