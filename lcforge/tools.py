"""Small maintenance commands: latest release tag, manifest fields, platform."""

from __future__ import annotations

import argparse
import platform
import re
import sys
import tomllib
from collections.abc import Iterable, Sequence
from pathlib import Path

import semver

__all__ = [
    "latest_tag",
    "semver_main",
    "read_package_field",
    "cargo_dig_main",
    "target_platform",
    "target_platform_main",
]

_TAG = re.compile(
    r"^v(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$",
    re.ASCII,
)

_OS_NAMES = {"darwin": "macos", "win32": "windows", "cygwin": "windows"}
_ARCH_NAMES = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
}


def latest_tag(tags: Iterable[str]) -> str:
    """Return the highest ``vMAJOR.MINOR.PATCH`` tag; other tags are ignored.

    Raises ``ValueError`` if no tag matches.
    """
    versions = sorted(
        semver.Version.parse(tag[1:]) for tag in tags if _TAG.match(tag)
    )
    if not versions:
        raise ValueError("no semantic version tags found")
    return f"v{versions[-1]}"


def semver_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print the latest semantic version tag.")
    parser.add_argument("tags", nargs="*")
    args = parser.parse_args(argv)
    try:
        print(latest_tag(args.tags))
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


def read_package_field(path: str | Path, field: str) -> str:
    """Return ``package.<field>`` from a TOML manifest as a string.

    Raises ``ValueError`` if the field is missing or not a string.
    """
    with open(path, "rb") as handle:
        table = tomllib.load(handle)
    package = table.get("package")
    if not isinstance(package, dict):
        raise ValueError(f"{path}: no [package] table")
    value = package.get(field)
    if not isinstance(value, str):
        raise ValueError(f"{path}: package.{field} is missing or not a string")
    return value


def cargo_dig_main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a package's name or version.")
    parser.add_argument("cargo_file_path", nargs="?", default="Cargo.toml")
    parser.add_argument("-v", "--version", action="store_true")
    parser.add_argument("-n", "--name", action="store_true")
    args = parser.parse_args(argv)
    field = "name" if args.name or not args.version else "version"
    try:
        print(read_package_field(args.cargo_file_path, field))
    except (OSError, ValueError, tomllib.TOMLDecodeError) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


def target_platform() -> tuple[str, str]:
    """Return the ``(os, arch)`` of the running platform."""
    os_name = _OS_NAMES.get(sys.platform, re.sub(r"\d+$", "", sys.platform))
    machine = platform.machine().lower()
    return os_name, _ARCH_NAMES.get(machine, machine)


def target_platform_main(argv: Sequence[str] | None = None) -> int:
    argparse.ArgumentParser(description="Print the OS and architecture.").parse_args(argv)
    os_name, arch = target_platform()
    print(f"{os_name} {arch}")
    return 0