"""Third-party module map built from the manifest."""

from __future__ import annotations

import re

from ..labels import TargetLabel
from ..manifest import Manifest

_SANITIZE_RE = re.compile(r"[-.]")


def sanitize_distribution(name: str) -> str:
    """``Foo-Bar.baz`` -> ``foo_bar_baz``, the form used in repository labels."""
    return _SANITIZE_RE.sub("_", name.lower())


class ThirdPartyModuleMap:
    """Exact module name -> external dependency label."""

    def __init__(self, modules_mapping: dict[str, str], repository: str, use_aliases: bool = True):
        self._mapping = dict(modules_mapping)
        self.repository = repository
        self.use_aliases = use_aliases

    @classmethod
    def from_manifest(cls, manifest: Manifest) -> ThirdPartyModuleMap:
        body = manifest.manifest
        use_aliases = body.pip_repository.use_pip_repository_aliases if body.pip_repository else True
        return cls(body.modules_mapping, body.repository_name, use_aliases)

    @classmethod
    def empty(cls) -> ThirdPartyModuleMap:
        return cls({}, "")

    def find(self, module_name: str) -> str | None:
        """Return the dependency label string for ``module_name``, if mapped."""
        distribution = self._mapping.get(module_name)
        if distribution is None:
            return None
        return str(self.label_for(distribution))

    def label_for(self, distribution: str) -> TargetLabel:
        sanitized = sanitize_distribution(distribution)
        if self.use_aliases:
            # @<repo>//<dist>
            return TargetLabel(repository=self.repository, package=sanitized, name=sanitized)
        # @<repo>_<dist>//:pkg
        return TargetLabel(repository=f"{self.repository}_{sanitized}", package="", name="pkg")

    def __contains__(self, module_name: object) -> bool:
        return module_name in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __repr__(self) -> str:
        return f"ThirdPartyModuleMap(@{self.repository}, {len(self._mapping)} modules)"
