"""Run wiring: plan + settings -> shared lookup structures -> resolved deps.

Everything shared between passes (index, scopes, third-party map) is built
here, before any pass starts, and handed to the resolver by injection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import ManifestError
from .manifest import Manifest
from .manifest import load_manifest
from .models import TargetResolution
from .resolution.index import ImportIndex
from .resolution.resolver import DependencyResolver
from .resolution.resolver import TargetJob
from .resolution.resolver import resolve_targets
from .resolution.stdlib import StdlibClassifier
from .resolution.third_party import ThirdPartyModuleMap
from .scopes import ScopeConfigs
from .settings import ResolverSettings
from .workspace import Plan

logger = logging.getLogger(__name__)


@dataclass
class Workspace:
    """Immutable lookup structures for one run."""

    plan: Plan
    scopes: ScopeConfigs
    index: ImportIndex

    def jobs(self) -> list[TargetJob]:
        return [
            TargetJob(
                target=spec.target_label,
                scope=self.scopes.scope_for(spec.target_label.package),
                imports=spec.import_payload(),
                resolved_deps=tuple(spec.resolved_deps),
            )
            for spec in self.plan.targets
        ]


def load_third_party(
    plan: Plan,
    settings: ResolverSettings,
    requirements: Path | None = None,
) -> ThirdPartyModuleMap:
    """Load the third-party module map for ``plan``.

    When ``requirements`` is given the manifest's integrity is checked
    against it.

    Raises:
        ManifestError: Named manifest missing or invalid, or stale against ``requirements``
    """
    path = plan.manifest_path(settings.manifest)
    # A manifest named in the plan must exist; the settings default may be absent
    if path is not None and (plan.manifest or path.exists()):
        manifest = load_manifest(path)
        if requirements is not None:
            _check_integrity(manifest, path, requirements)
        return ThirdPartyModuleMap.from_manifest(manifest)
    logger.warning(f"[manifest:load] no manifest at {path}, third-party imports will not resolve")
    return ThirdPartyModuleMap.empty()


def _check_integrity(manifest: Manifest, path: Path, requirements: Path) -> None:
    if not requirements.exists():
        raise ManifestError(f"Requirements file not found: {requirements}")
    if not manifest.integrity:
        logger.warning(f"[manifest:integrity] {path} has no integrity field, cannot check it against {requirements}")
        return
    if not manifest.verify_integrity(path, requirements):
        raise ManifestError(f"Manifest {path} is out of date with {requirements}, regenerate it")


def build_workspace(plan: Plan, settings: ResolverSettings, requirements: Path | None = None) -> Workspace:
    scopes = ScopeConfigs(plan.directives, load_third_party(plan, settings, requirements))

    index = ImportIndex()
    for spec in plan.targets:
        label = spec.target_label
        scope = scopes.scope_for(label.package)
        index.add_target(label, spec.srcs, spec.provides, project_root=scope.project_root)
    index.freeze()

    # Scopes are computed up front so passes only read them
    for package in plan.packages():
        scopes.scope_for(package)

    return Workspace(plan=plan, scopes=scopes, index=index)


def run(
    plan: Plan,
    settings: ResolverSettings,
    explain: str | None = None,
    classifier=None,
    requirements: Path | None = None,
) -> list[TargetResolution]:
    """Resolve every target in ``plan``.

    Raises:
        ClassifierError: The standard-library check failed (fatal)
        ManifestError: The manifest is missing, invalid or stale
        ResolutionFailedError: Some targets have unresolved or ambiguous imports
    """
    workspace = build_workspace(plan, settings, requirements)
    owned = classifier is None
    classifier = classifier or StdlibClassifier(settings.python)
    try:
        resolver = DependencyResolver(workspace.index, classifier, explain=explain)
        return resolve_targets(resolver, workspace.jobs(), workers=settings.workers)
    finally:
        if owned:
            classifier.close()
