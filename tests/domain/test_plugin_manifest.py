from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from mbox.domain.launcher import LaunchResult, LauncherItem, LauncherType, roles_match
from mbox.domain.plugin import ManifestError, PluginPackage
from mbox.domain.session import Session, format_duration, session_title


def _manifest(**overrides):
    manifest = {
        "name": "foo",
        "version": "1.2.0",
        "description": "Foo tools",
        "roles": ["qa"],
        "launcher": [
            {"name": "Alpha", "roles": ["qa"], "scripts": {"install": "scripts/alpha.sh"}},
            {"name": "beta", "type": "check", "scripts": {"check": "scripts/beta.sh"}},
        ],
    }
    manifest.update(overrides)
    return manifest


def test_from_manifest_builds_launcher_items(tmp_path: Path) -> None:
    package = PluginPackage.from_manifest(tmp_path, _manifest())
    assert package.has_launcher
    alpha, beta = package.launcher_items
    assert alpha.identifier == "foo/Alpha"
    assert alpha.launcher_type is LauncherType.INSTALL
    assert alpha.script_for(LauncherType.INSTALL) == tmp_path / "scripts/alpha.sh"
    assert alpha.plugin_path == tmp_path
    assert beta.launcher_type is LauncherType.CHECK
    assert beta.script_for(LauncherType.INSTALL) is None


def test_plugin_without_launcher(tmp_path: Path) -> None:
    package = PluginPackage.from_manifest(tmp_path, {"name": "bare", "version": "0.1"})
    assert not package.has_launcher
    assert package.to_dict()["launcher"] == []


def test_duplicate_items_are_rejected(tmp_path: Path) -> None:
    launcher = [{"name": "Alpha"}, {"name": "alpha"}]
    with pytest.raises(ManifestError):
        PluginPackage.from_manifest(tmp_path, _manifest(launcher=launcher))


def test_unknown_launcher_type_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        PluginPackage.from_manifest(tmp_path, _manifest(launcher=[{"name": "a", "type": "deploy"}]))


def test_invalid_version_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ManifestError):
        PluginPackage.from_manifest(tmp_path, _manifest(version="not a version"))


def test_cli_compatibility(tmp_path: Path) -> None:
    package = PluginPackage.from_manifest(tmp_path, _manifest(compatibility={"cli": ">=2.0,<3"}))
    assert package.is_compatible("2.0.0")
    assert not package.is_compatible("3.1.0")


def test_detail_description_lists_items(tmp_path: Path) -> None:
    text = PluginPackage.from_manifest(tmp_path, _manifest()).detail_description()
    assert text.splitlines()[0] == "foo (1.2.0)"
    assert "    - Alpha (install) [qa]" in text
    assert "    - beta (check)" in text


def test_launch_result_records_each_item_once() -> None:
    item = LauncherItem("foo", "a")
    other = LauncherItem("foo", "b")
    result = LaunchResult()
    result.record(item, True)
    result.record(item, False)
    result.record(other, False)
    assert result.to_dict() == {"success": ["foo/a"], "failed": ["foo/b"]}
    assert result.exit_code == 1


def test_roles_match() -> None:
    assert roles_match(["qa"], ["qa", "dev"])
    assert not roles_match(["prod"], ["qa"])
    assert roles_match([], ["qa"])
    assert roles_match(["prod"], [])


def test_session_title_stops_at_flags() -> None:
    assert session_title(["plugin", "launch", "--all", "foo"]) == "plugin launch"
    assert session_title(["--help"]) is None


def test_format_duration() -> None:
    assert format_duration(1.5) == "1.50s"
    assert format_duration(125) == "2m 5s"


def test_session_duration_is_measured_from_start() -> None:
    started = datetime(2024, 1, 1, 12, 0, 0)
    session = Session("plugin launch", is_main=True, started_at=started)
    assert session.duration(started + timedelta(seconds=90)) == 90.0
