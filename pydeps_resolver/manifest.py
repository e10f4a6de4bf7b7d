"""Third-party manifest loading.

The manifest maps importable top-level (or partial) module names to the
distribution that provides them. It is regenerated by a separate tool from
the pinned requirements and is read-only here::

    manifest:
      modules_mapping:
        numpy: numpy
        yaml: PyYAML
      pip_repository:
        name: pip
    integrity: 6d1c...
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from .errors import ManifestError

logger = logging.getLogger(__name__)


class PipRepository(BaseModel):
    """Repository that materializes the pinned distributions."""

    name: str
    use_pip_repository_aliases: bool = True


class ManifestBody(BaseModel):
    modules_mapping: dict[str, str] = Field(default_factory=dict)
    pip_repository: PipRepository | None = None
    pip_deps_repository_name: str = ""

    @property
    def repository_name(self) -> str:
        if self.pip_deps_repository_name:
            return self.pip_deps_repository_name
        if self.pip_repository is not None:
            return self.pip_repository.name
        return ""


class Manifest(BaseModel):
    """Parsed manifest file."""

    manifest: ManifestBody = Field(default_factory=ManifestBody)
    integrity: str | None = None

    def verify_integrity(self, manifest_path: Path, requirements_path: Path) -> bool:
        """Check ``integrity`` against the requirements file the manifest was built from.

        The digest covers the manifest body (without the integrity line) followed
        by the requirements file contents.

        Returns:
            True if matching or if the manifest carries no integrity field
        """
        if not self.integrity:
            return True
        expected = compute_integrity(manifest_path, requirements_path)
        if expected != self.integrity:
            logger.warning(f"[manifest:integrity] {manifest_path} is out of date with {requirements_path}")
            return False
        return True


def compute_integrity(manifest_path: Path, requirements_path: Path) -> str:
    body = "".join(
        line
        for line in manifest_path.read_text(encoding="utf-8").splitlines(keepends=True)
        if not line.startswith("integrity:")
    )
    digest = hashlib.sha256()
    digest.update(body.encode("utf-8"))
    digest.update(requirements_path.read_bytes())
    return digest.hexdigest()


def load_manifest(path: Path) -> Manifest:
    """Load and validate a manifest file.

    Raises:
        ManifestError: File missing, not YAML, or wrong shape
    """
    if not path.exists():
        raise ManifestError(f"Manifest not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"Failed to parse manifest {path}: {e}") from e

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e

    logger.debug(f"[manifest:load] {path} ({len(manifest.manifest.modules_mapping)} modules)")
    return manifest
