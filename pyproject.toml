[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lcforge"
version = "0.1.0"
description = "Secure randomness, RSA signing and verification, test-vector parsing and small benchmark and release tools"
requires-python = ">=3.11"
keywords = [
    "cryptography",
    "rsa",
    "random",
    "test-vectors",
    "benchmark",
    "semver",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "cryptography>=41",
    "semver>=3",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
]

[project.scripts]
lcforge-criterion = "lcforge.criterion:main"
lcforge-semver = "lcforge.tools:semver_main"
lcforge-cargo-dig = "lcforge.tools:cargo_dig_main"
lcforge-target-platform = "lcforge.tools:target_platform_main"

[tool.hatch.build.targets.wheel]
packages = ["lcforge"]

[tool.hatch.build.targets.sdist]
include = [
    "lcforge",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
