from unittest import mock

import pytest

from lcforge.tools import (
    cargo_dig_main,
    latest_tag,
    read_package_field,
    semver_main,
    target_platform,
    target_platform_main,
)

MANIFEST = '[package]\nname = "demo"\nversion = "0.1.0"\n'


def test_latest_tag_orders_numerically():
    tags = ["v1.2.0", "v1.10.0", "v1.9.3"]
    assert latest_tag(tags) == "v1.10.0"


def test_latest_tag_ignores_non_matching():
    tags = ["v1.0.0", "2.0.0", "v01.0.0", "release", "v1.0"]
    assert latest_tag(tags) == "v1.0.0"


def test_latest_tag_release_beats_prerelease():
    assert latest_tag(["v1.0.0-rc.1", "v1.0.0"]) == "v1.0.0"
    assert latest_tag(["v1.0.0", "v2.0.0-alpha"]) == "v2.0.0-alpha"


def test_latest_tag_none_matching():
    with pytest.raises(ValueError):
        latest_tag(["nightly", "1.0.0"])


def test_semver_main_prints_latest(capsys):
    assert semver_main(["v0.1.0", "v0.2.0", "junk"]) == 0
    assert capsys.readouterr().out == "v0.2.0\n"


def test_semver_main_no_tags():
    assert semver_main([]) == 1


def test_read_package_field(tmp_path):
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text(MANIFEST)
    assert read_package_field(manifest, "name") == "demo"
    assert read_package_field(manifest, "version") == "0.1.0"


def test_read_package_field_missing(tmp_path):
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text('[workspace]\nmembers = ["a"]\n')
    with pytest.raises(ValueError):
        read_package_field(manifest, "name")


@pytest.mark.parametrize(
    "flags, expected",
    [([], "demo"), (["-n"], "demo"), (["-v"], "0.1.0"), (["-v", "-n"], "demo")],
)
def test_cargo_dig_main_default_path(tmp_path, monkeypatch, capsys, flags, expected):
    (tmp_path / "Cargo.toml").write_text(MANIFEST)
    monkeypatch.chdir(tmp_path)
    assert cargo_dig_main(flags) == 0
    assert capsys.readouterr().out == f"{expected}\n"


def test_cargo_dig_main_missing_file(tmp_path):
    assert cargo_dig_main([str(tmp_path / "absent.toml")]) == 1


def test_target_platform_macos_arm():
    with mock.patch("lcforge.tools.sys.platform", "darwin"), mock.patch(
        "platform.machine", return_value="arm64"
    ):
        assert target_platform() == ("macos", "aarch64")


def test_target_platform_linux_amd64(capsys):
    with mock.patch("lcforge.tools.sys.platform", "linux"), mock.patch(
        "platform.machine", return_value="AMD64"
    ):
        assert target_platform_main([]) == 0
    assert capsys.readouterr().out == "linux x86_64\n"


def test_target_platform_main_matches_function(capsys):
    os_name, arch = target_platform()
    assert target_platform_main([]) == 0
    assert capsys.readouterr().out == f"{os_name} {arch}\n"