[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wgkit"
version = "0.1.0"
description = "Building blocks for a userspace WireGuard-style daemon: replay filtering, TAI64N timestamps, rate limiting, timers, padding and the UAPI control socket"
requires-python = ">=3.10"
dependencies = []
keywords = ["wireguard", "vpn", "networking", "replay-protection", "ratelimiter", "tai64n", "uapi"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wgkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
