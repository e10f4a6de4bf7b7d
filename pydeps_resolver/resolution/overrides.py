"""Override table built from ``resolve`` directives."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..errors import ConfigError
from ..errors import LabelError
from ..labels import TargetLabel
from ..models import ImportKey

logger = logging.getLogger(__name__)


class OverrideTable:
    """Exact ``(language, import string) -> label`` mapping for one scope.

    Tables are immutable. ``extend()`` returns a new table layered over this
    one, which is how a package inherits its parent's directives.
    """

    def __init__(self, entries: Mapping[ImportKey, TargetLabel] | None = None):
        self._entries: dict[ImportKey, TargetLabel] = dict(entries or {})

    @classmethod
    def from_directive(cls, value: str) -> tuple[ImportKey, TargetLabel]:
        """Parse the value of a ``resolve <language> <import-string> <label>`` directive.

        Raises:
            ConfigError: Wrong number of fields or a malformed label
        """
        fields = value.split()
        if len(fields) != 3:
            raise ConfigError(f"resolve directive needs '<language> <import-string> <label>', got: {value!r}")
        language, import_string, raw_label = fields
        try:
            label = TargetLabel.parse(raw_label)
        except LabelError as e:
            raise ConfigError(f"resolve directive for {import_string!r}: {e}") from e
        return ImportKey(language, import_string), label

    def extend(self, entries: Mapping[ImportKey, TargetLabel]) -> OverrideTable:
        if not entries:
            return self
        merged = dict(self._entries)
        merged.update(entries)
        return OverrideTable(merged)

    def find(self, language: str, import_string: str) -> TargetLabel | None:
        """Exact lookup, no prefix search."""
        return self._entries.get(ImportKey(language, import_string))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OverrideTable({len(self._entries)} entries)"
