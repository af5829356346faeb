"""Signature history: cross-revision record of each function's signature."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from capidoc.schema import Function, SignatureRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignatureChange:
    """A signature difference observed at one revision."""

    name: str
    revision: str
    before: str | None
    after: str | None


@dataclass
class SignatureHistory:
    """Accumulates, revision by revision, where each function exists and changed.

    Revisions must be tallied in processing order, each exactly once. A
    function's signature is compared with the last one this history saw for
    it, which is not necessarily the previous revision when the function
    was absent in between.
    """

    records: dict[str, SignatureRecord] = field(default_factory=dict)
    last_seen: dict[str, str | None] = field(default_factory=dict)

    def tally(self, revision: str, functions: Mapping[str, Function]) -> list[SignatureChange]:
        """Fold one revision's functions into the history."""
        changes: list[SignatureChange] = []
        for name, func in functions.items():
            record = self.records.get(name)
            if record is None:
                record = SignatureRecord()
                self.records[name] = record
            elif self.last_seen.get(name) != func.sig:
                record.changes[revision] = True
                changes.append(
                    SignatureChange(
                        name=name,
                        revision=revision,
                        before=self.last_seen.get(name),
                        after=func.sig,
                    )
                )
            record.exists.append(revision)
            self.last_seen[name] = func.sig

        if changes:
            logger.debug("%s: %d signature changes", revision, len(changes))
        return changes
