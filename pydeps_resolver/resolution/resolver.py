"""Dependency resolution engine.

Turns a target's imports into build dependencies. Each import is resolved
by a pure function with three possible outcomes (``Resolved``, ``Skipped``,
``Failed``). Strategies, in order of precedence, for each dotted-prefix
candidate of the import:

1. Override (``resolve`` directive)
2. Third-party module map (manifest)
3. First-party import index

When no candidate matches, the *original* module name is checked against
the standard library.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Protocol
from typing import Union

from ..errors import ClassifierError
from ..errors import ResolutionFailedError
from ..labels import TargetLabel
from ..models import LANGUAGE
from ..models import ImportList
from ..models import ImportRecord
from ..models import Imports
from ..models import NoImports
from ..models import ResolutionError
from ..models import ResolutionScope
from ..models import TargetResolution
from .index import ImportIndex
from .index import IndexEntry
from .overrides import OverrideTable
from .third_party import ThirdPartyModuleMap

logger = logging.getLogger(__name__)

EXPLAIN_ENV = "EXPLAIN_DEPENDENCY"


class Classifier(Protocol):
    def is_standard_library(self, module_name: str) -> bool: ...


class Strategy(str, Enum):
    OVERRIDE = "override"
    THIRD_PARTY = "third-party"
    INDEX = "index"


class SkipReason(str, Enum):
    SELF = "self"
    STDLIB = "stdlib"
    IGNORED = "ignored"
    UNVALIDATED = "unvalidated"


@dataclass(frozen=True)
class Resolved:
    dep: str
    strategy: Strategy
    import_string: str


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason


@dataclass(frozen=True)
class Failed:
    error: ResolutionError


Outcome = Union[Resolved, Skipped, Failed]

_EXPLANATIONS = {
    Strategy.OVERRIDE: 'which resolves using the "resolve" directive.',
    Strategy.THIRD_PARTY: "which resolves from the third-party module {module!r} from the wheel {dep!r}.",
    Strategy.INDEX: "which resolves from the first-party indexed labels.",
}


@dataclass
class TargetJob:
    """Everything one resolution pass needs for one target."""

    target: TargetLabel
    scope: ResolutionScope
    imports: Imports
    resolved_deps: tuple[str, ...] = ()


class DependencyResolver:
    """Resolves imports against the shared, read-only lookup structures.

    Args:
        index: First-party import index (frozen)
        classifier: Standard-library classifier
        language: Language key used for index and override lookups
        explain: Dependency label to explain; defaults to ``$EXPLAIN_DEPENDENCY``
    """

    def __init__(
        self,
        index: ImportIndex,
        classifier: Classifier,
        language: str = LANGUAGE,
        explain: str | None = None,
    ):
        self.index = index
        self.classifier = classifier
        self.language = language
        self.explain = explain if explain is not None else os.getenv(EXPLAIN_ENV, "")

    def resolve_import(self, target: TargetLabel, scope: ResolutionScope, record: ImportRecord) -> Outcome:
        """Resolve one import of ``target``.

        Raises:
            ClassifierError: The standard-library check could not run
        """
        if scope.is_ignored(record.module_name):
            return Skipped(SkipReason.IGNORED)

        overrides: OverrideTable = scope.overrides or OverrideTable()
        third_party: ThirdPartyModuleMap = scope.third_party or ThirdPartyModuleMap.empty()

        # First ambiguity seen; reported only if no shorter candidate resolves
        pending: Failed | None = None

        for candidate in record.candidates:
            override = overrides.find(self.language, candidate)
            if override is not None:
                if not override.repository:
                    override = override.with_repository(target.repository)
                if override.same_target(target, target.repository, target.package):
                    return Skipped(SkipReason.SELF)
                if override.repository == target.repository:
                    override = override.with_repository("")
                return Resolved(str(override), Strategy.OVERRIDE, candidate)

            dep = third_party.find(candidate)
            if dep is not None:
                return Resolved(dep, Strategy.THIRD_PARTY, candidate)

            matches = self.index.find(self.language, candidate)
            if not matches:
                continue

            outcome = self._pick_match(target, scope, record, candidate, matches)
            if isinstance(outcome, Failed):
                logger.debug(f"[resolve:ambiguous] {target} {candidate}, trying shorter candidates")
                pending = pending or outcome
                continue
            return outcome

        if pending is not None:
            return pending
        if self.classifier.is_standard_library(record.module_name):
            return Skipped(SkipReason.STDLIB)
        if scope.validate_import_statements:
            return Failed(ResolutionError.unresolved(record))
        return Skipped(SkipReason.UNVALIDATED)

    def _pick_match(
        self,
        target: TargetLabel,
        scope: ResolutionScope,
        record: ImportRecord,
        candidate: str,
        matches: list[IndexEntry],
    ) -> Outcome:
        remaining = [m for m in matches if not m.is_self_import(target)]
        if not remaining:
            return Skipped(SkipReason.SELF)

        if len(remaining) > 1:
            same_root = [m for m in remaining if m.label.is_under(scope.project_root)]
            if len(same_root) != 1:
                return Failed(ResolutionError.ambiguous(record, candidate, [m.label for m in remaining]))
            remaining = same_root

        label = remaining[0].label.rel(target.repository, target.package)
        return Resolved(str(label), Strategy.INDEX, candidate)

    def resolve_target(
        self,
        target: TargetLabel,
        scope: ResolutionScope,
        imports: Imports,
        resolved_deps: Iterable[str] = (),
    ) -> TargetResolution:
        """Run one resolution pass for ``target``.

        Pre-resolved deps are merged in and the target's own label is always
        removed. The result is failed when any import produced an error.
        """
        result = TargetResolution(target=target)

        if isinstance(imports, ImportList):
            for record in imports:
                outcome = self.resolve_import(target, scope, record)
                if isinstance(outcome, Resolved):
                    result.deps.add(outcome.dep)
                    self._maybe_explain(target, record, outcome)
                elif isinstance(outcome, Failed):
                    result.errors.append(outcome.error)
                else:
                    logger.debug(f"[resolve:skip] {target} {record.module_name} ({outcome.reason.value})")
        elif not isinstance(imports, NoImports):
            raise TypeError(f"Unsupported imports payload: {type(imports).__name__}")

        result.deps.update(resolved_deps)
        result.deps.discard_self(target)

        if result.failed:
            joined = "\n".join(str(e) for e in result.errors)
            logger.error(f"failed to validate dependencies for target {str(target)!r}:\n{joined}")
        return result

    def _maybe_explain(self, target: TargetLabel, record: ImportRecord, outcome: Resolved) -> None:
        if not self.explain or self.explain != outcome.dep:
            return
        how = _EXPLANATIONS[outcome.strategy].format(module=record.module_name, dep=outcome.dep)
        logger.info(
            f"Explaining dependency ({outcome.dep}): in the target {str(target)!r}, "
            f"the file {record.source_file!r} imports {outcome.import_string!r} "
            f"at line {record.line_number}, {how}",
            extra={
                "event": "dependency:explain",
                "dependency": outcome.dep,
                "strategy": outcome.strategy.value,
                "target": str(target),
                "file": record.source_file,
                "line": record.line_number,
                "import_string": outcome.import_string,
            },
        )


def resolve_targets(resolver: DependencyResolver, jobs: list[TargetJob], workers: int = 4) -> list[TargetResolution]:
    """Resolve all targets, in parallel, in job order.

    Raises:
        ClassifierError: Fatal; raised after in-flight passes finish, queued
            passes are cancelled
        ResolutionFailedError: At least one target accumulated errors
    """
    results: dict[int, TargetResolution] = {}
    fatal: ClassifierError | None = None

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {
            executor.submit(resolver.resolve_target, job.target, job.scope, job.imports, job.resolved_deps): i
            for i, job in enumerate(jobs)
        }
        for future in as_completed(futures):
            if future.cancelled():
                continue
            try:
                results[futures[future]] = future.result()
            except ClassifierError as e:
                if fatal is None:
                    fatal = e
                    logger.error(f"[resolve:fatal] {e}")
                    for pending in futures:
                        pending.cancel()

    if fatal is not None:
        raise fatal

    ordered = [results[i] for i in range(len(jobs))]
    failures = [r for r in ordered if r.failed]
    if failures:
        raise ResolutionFailedError(failures)
    return ordered
