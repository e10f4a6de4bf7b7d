"""Tests for third-party manifest loading."""

import pytest

from pydeps_resolver.errors import ManifestError
from pydeps_resolver.manifest import compute_integrity
from pydeps_resolver.manifest import load_manifest

MANIFEST = """\
manifest:
  modules_mapping:
    numpy: numpy
    yaml: PyYAML
  pip_repository:
    name: pip
"""


def test_load_manifest(tmp_path):
    path = tmp_path / "gazelle_python.yaml"
    path.write_text(MANIFEST)

    manifest = load_manifest(path)

    assert manifest.manifest.modules_mapping == {"numpy": "numpy", "yaml": "PyYAML"}
    assert manifest.manifest.repository_name == "pip"
    assert manifest.manifest.pip_repository.use_pip_repository_aliases is True
    assert manifest.integrity is None


def test_empty_manifest_file(tmp_path):
    path = tmp_path / "gazelle_python.yaml"
    path.write_text("")

    manifest = load_manifest(path)

    assert manifest.manifest.modules_mapping == {}
    assert manifest.manifest.repository_name == ""


def test_missing_manifest(tmp_path):
    with pytest.raises(ManifestError, match="not found"):
        load_manifest(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "gazelle_python.yaml"
    path.write_text("manifest: [unclosed")

    with pytest.raises(ManifestError, match="Failed to parse"):
        load_manifest(path)


def test_wrong_shape(tmp_path):
    path = tmp_path / "gazelle_python.yaml"
    path.write_text("manifest:\n  modules_mapping: [numpy]\n")

    with pytest.raises(ManifestError, match="Invalid manifest"):
        load_manifest(path)


class TestIntegrity:
    def test_matching_integrity(self, tmp_path):
        requirements = tmp_path / "requirements_lock.txt"
        requirements.write_text("numpy==1.26.4\n")
        path = tmp_path / "gazelle_python.yaml"
        path.write_text(MANIFEST)
        digest = compute_integrity(path, requirements)
        path.write_text(MANIFEST + f"integrity: {digest}\n")

        manifest = load_manifest(path)

        assert manifest.integrity == digest
        assert manifest.verify_integrity(path, requirements) is True

    def test_stale_integrity(self, tmp_path, caplog):
        requirements = tmp_path / "requirements_lock.txt"
        requirements.write_text("numpy==1.26.4\n")
        path = tmp_path / "gazelle_python.yaml"
        path.write_text(MANIFEST + "integrity: deadbeef\n")

        assert load_manifest(path).verify_integrity(path, requirements) is False
        assert "out of date" in caplog.text

    def test_no_integrity_always_passes(self, tmp_path):
        path = tmp_path / "gazelle_python.yaml"
        path.write_text(MANIFEST)

        assert load_manifest(path).verify_integrity(path, tmp_path / "missing.txt") is True
