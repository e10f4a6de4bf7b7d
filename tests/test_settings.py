"""Tests for scope-aware resolver settings."""

import pytest
import yaml

from pydeps_resolver.errors import ConfigError
from pydeps_resolver.settings import AppSettings
from pydeps_resolver.settings import SettingsPaths


@pytest.fixture
def paths(tmp_path, monkeypatch):
    monkeypatch.delenv("PYDEPS_PYTHON", raising=False)
    monkeypatch.delenv("PYDEPS_WORKERS", raising=False)
    return SettingsPaths(
        global_settings=tmp_path / "home" / "settings.yaml",
        project_settings=tmp_path / "project" / "settings.yaml",
    )


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


def test_defaults_without_files(paths):
    settings = AppSettings(paths).get_resolver_settings()

    assert settings.python is None
    assert settings.workers == 4
    assert settings.manifest == "gazelle_python.yaml"


def test_project_overrides_global(paths):
    _write(paths.global_settings, {"resolver": {"python": "/usr/bin/python3", "workers": 2}})
    _write(paths.project_settings, {"resolver": {"workers": 16}})

    settings = AppSettings(paths).get_resolver_settings()

    assert settings.python == "/usr/bin/python3"
    assert settings.workers == 16


def test_environment_wins(paths, monkeypatch):
    _write(paths.project_settings, {"resolver": {"python": "/usr/bin/python3", "workers": 2}})
    monkeypatch.setenv("PYDEPS_PYTHON", "/opt/python")
    monkeypatch.setenv("PYDEPS_WORKERS", "6")

    settings = AppSettings(paths).get_resolver_settings()

    assert settings.python == "/opt/python"
    assert settings.workers == 6


@pytest.mark.parametrize("workers", ["many", 0, -3])
def test_invalid_worker_count(paths, workers):
    _write(paths.project_settings, {"resolver": {"workers": workers}})

    with pytest.raises(ConfigError, match="workers"):
        AppSettings(paths).get_resolver_settings()


def test_resolver_section_must_be_mapping(paths):
    _write(paths.project_settings, {"resolver": ["python"]})

    with pytest.raises(ConfigError, match="must be a mapping"):
        AppSettings(paths).get_resolver_settings()


def test_unparseable_file(paths):
    paths.project_settings.parent.mkdir(parents=True)
    paths.project_settings.write_text("resolver: [unclosed")

    with pytest.raises(ConfigError, match="Failed to parse"):
        AppSettings(paths).get_resolver_settings()


def test_set_resolver_setting_keeps_other_keys(paths):
    _write(paths.project_settings, {"resolver": {"python": "/usr/bin/python3"}, "other": {"keep": True}})

    AppSettings(paths).set_resolver_setting("workers", 8)

    stored = yaml.safe_load(paths.project_settings.read_text())
    assert stored == {"resolver": {"python": "/usr/bin/python3", "workers": 8}, "other": {"keep": True}}


def test_set_global_setting(paths):
    AppSettings(paths).set_resolver_setting("manifest", "deps.yaml", scope="global")

    assert yaml.safe_load(paths.global_settings.read_text()) == {"resolver": {"manifest": "deps.yaml"}}
    assert not paths.project_settings.exists()


def test_deep_merge_nested():
    merged = AppSettings(SettingsPaths.default())._deep_merge(
        {"resolver": {"python": "a", "workers": 2}, "x": 1},
        {"resolver": {"workers": 3}, "x": 2},
    )

    assert merged == {"resolver": {"python": "a", "workers": 3}, "x": 2}
