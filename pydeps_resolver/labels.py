"""Build target labels.

A label names one build target: ``@repo//package/path:name``. The repository
part is empty for the current repository.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass
from dataclasses import replace

from .errors import LabelError

_LABEL_RE = re.compile(
    r"^(?:@(?P<repo>[\w.\-+~]*))?"
    r"(?:(?P<abs>//)(?P<pkg>[^:@]*))?"
    r"(?::(?P<name>[^:@/][^:@]*))?$"
)


@dataclass(frozen=True)
class TargetLabel:
    """Immutable identity of a build target."""

    repository: str = ""
    package: str = ""
    name: str = ""
    relative: bool = False

    @classmethod
    def parse(cls, text: str) -> TargetLabel:
        """Parse a label string.

        Accepted forms: ``//pkg:name``, ``//pkg`` (name = last component),
        ``@repo//pkg:name``, ``@repo`` (``@repo//:repo``) and ``:name``
        (relative to the current package).

        Raises:
            LabelError: The string is not a label
        """
        text = text.strip()
        match = _LABEL_RE.match(text)
        if not text or match is None:
            raise LabelError(f"Invalid label: {text!r}")

        repo = match.group("repo") or ""
        pkg = match.group("pkg") or ""
        name = match.group("name")
        is_absolute = match.group("abs") is not None

        if pkg.endswith("/") or "//" in pkg:
            raise LabelError(f"Invalid package path in label: {text!r}")

        if not is_absolute:
            if match.group("repo") is not None and name is None:
                return cls(repository=repo, package="", name=repo)
            if name is None or match.group("repo") is not None:
                raise LabelError(f"Invalid label: {text!r}")
            return cls(name=name, relative=True)

        if name is None:
            name = posixpath.basename(pkg) if pkg else repo
            if not name:
                raise LabelError(f"Label has no target name: {text!r}")

        return cls(repository=repo, package=pkg, name=name)

    def __str__(self) -> str:
        if self.relative:
            return f":{self.name}"
        repo = f"@{self.repository}" if self.repository else ""
        if self.package and posixpath.basename(self.package) == self.name:
            return f"{repo}//{self.package}"
        return f"{repo}//{self.package}:{self.name}"

    def with_repository(self, repository: str) -> TargetLabel:
        return replace(self, repository=repository)

    def rel(self, repository: str, package: str) -> TargetLabel:
        """Shorten this label as seen from ``//package`` in ``repository``.

        Labels in another repository are returned unchanged. Labels in the
        same package become relative (``:name``).
        """
        if self.relative or self.repository != repository:
            return self
        if self.package == package:
            return TargetLabel(name=self.name, relative=True)
        return TargetLabel(package=self.package, name=self.name)

    def same_target(self, other: TargetLabel, repository: str = "", package: str = "") -> bool:
        """True when both labels name the same target.

        Relative labels are interpreted against ``repository`` and ``package``.
        """
        return self._absolute(repository, package) == other._absolute(repository, package)

    def _absolute(self, repository: str, package: str) -> tuple[str, str, str]:
        if self.relative:
            return (repository, package, self.name)
        return (self.repository, self.package, self.name)

    def is_under(self, root: str) -> bool:
        """True when this label's package lies at or below the ``root`` path."""
        root = root.strip("/")
        if not root:
            return True
        return self.package == root or self.package.startswith(root + "/")
