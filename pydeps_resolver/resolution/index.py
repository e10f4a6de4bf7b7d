"""First-party import index.

Maps ``(language, import string)`` to every target that provides it. Built
once from all targets before resolution starts, then only read.
"""

from __future__ import annotations

import logging
import posixpath
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from ..labels import TargetLabel
from ..models import LANGUAGE
from ..models import ImportKey
from ..models import python_module_path

logger = logging.getLogger(__name__)

PACKAGE_ENTRYPOINT = "__init__.py"


@dataclass(frozen=True)
class IndexEntry:
    """One target providing an import string.

    Attributes:
        label: The providing target
        project_root: Project root of the package that declared the target
    """

    label: TargetLabel
    project_root: str = ""

    def is_self_import(self, target: TargetLabel) -> bool:
        return self.label.same_target(target, target.repository, target.package)


def import_spec_from_src(project_root: str, package: str, src: str) -> ImportKey:
    """Import string a ``.py`` source provides, relative to its project root.

    ``src`` ``b/c.py`` in package ``a/x`` under root ``a`` provides ``x.b.c``.
    A package's ``__init__.py`` provides the package itself.
    """
    python_dir = posixpath.normpath(posixpath.join(package, posixpath.dirname(src)))
    rel_dir = posixpath.relpath(python_dir, project_root or ".")
    if rel_dir.startswith(".."):
        # Source outside its project root; index it from the workspace root.
        rel_dir = python_dir
    python_pkg = python_module_path(rel_dir)

    filename = posixpath.basename(src)
    if filename == PACKAGE_ENTRYPOINT and python_pkg:
        return ImportKey(LANGUAGE, python_pkg)

    module = filename[: -len(".py")] if filename.endswith(".py") else filename
    return ImportKey(LANGUAGE, f"{python_pkg}.{module}" if python_pkg else module)


class ImportIndex:
    """Read-only registry of which targets provide which import strings."""

    def __init__(self):
        self._entries: dict[ImportKey, list[IndexEntry]] = defaultdict(list)
        self._frozen = False

    def add(self, key: ImportKey, entry: IndexEntry) -> None:
        if self._frozen:
            raise RuntimeError("ImportIndex is frozen")
        if entry not in self._entries[key]:
            self._entries[key].append(entry)

    def add_target(
        self,
        label: TargetLabel,
        srcs: Iterable[str] = (),
        provides: Iterable[str] = (),
        project_root: str = "",
    ) -> list[ImportKey]:
        """Index a target's ``.py`` sources and explicit ``provides``.

        Returns:
            Keys the target was indexed under
        """
        keys = [
            import_spec_from_src(project_root, label.package, src)
            for src in srcs
            if posixpath.splitext(src)[1] == ".py"
        ]
        keys.extend(ImportKey(LANGUAGE, imp) for imp in provides)
        entry = IndexEntry(label=label, project_root=project_root)
        for key in keys:
            self.add(key, entry)
        return keys

    def freeze(self) -> ImportIndex:
        self._frozen = True
        self._entries = dict(self._entries)
        logger.debug(f"[index:build] {len(self._entries)} import strings indexed")
        return self

    def find(self, language: str, import_string: str) -> list[IndexEntry]:
        return list(self._entries.get(ImportKey(language, import_string), ()))

    def items(self):
        return sorted(self._entries.items(), key=lambda item: (item[0].language, item[0].import_string))

    def __len__(self) -> int:
        return len(self._entries)
