"""API audit: consistency checks reported for the current revision."""

from __future__ import annotations

import logging

from capidoc.engine.history import SignatureChange
from capidoc.engine.signatures import classify_signature_change
from capidoc.schema import ApiAudit, SignatureFinding, Snapshot

logger = logging.getLogger(__name__)


def audit_snapshot(
    revision: str,
    snapshot: Snapshot,
    changes: list[SignatureChange],
) -> ApiAudit:
    """Collect documentation and signature findings for *snapshot*.

    A function whose doc comment still holds a ``@param`` line documents a
    parameter the prototype does not declare.
    """
    unmatched = sorted(
        name
        for name, func in snapshot.functions.items()
        if "@param" in func.comments or "@param" in func.description
    )
    findings = [
        SignatureFinding(
            name=c.name,
            category=classify_signature_change(c.before, c.after),
            before=c.before,
            after=c.after,
        )
        for c in sorted(changes, key=lambda c: c.name)
    ]
    return ApiAudit(revision=revision, unmatched_params=unmatched, signature_changes=findings)


def log_audit(audit: ApiAudit) -> None:
    """Log audit findings as warnings."""
    if audit.clean:
        return
    logger.warning("* checking your api")
    if audit.unmatched_params:
        logger.warning("  - unmatched params in")
        for name in audit.unmatched_params:
            logger.warning("\t%s", name)
    if audit.signature_changes:
        logger.warning("  - signature changes in")
        for finding in audit.signature_changes:
            logger.warning("\t%s: %s", finding.name, finding.category)
