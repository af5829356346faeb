"""Signature comparison for C prototypes.

Standalone module: no engine imports, just string analysis. Signatures
have the shape ``ret(type, type)``, e.g. ``int(git_repository **, const char *)``.
"""

from __future__ import annotations

PARAMETER_REMOVED = "PARAMETER REMOVED"
PARAMETER_ADDED = "PARAMETER ADDED"
PARAMETER_TYPE_CHANGED = "PARAMETER TYPE CHANGED"
RETURN_TYPE_CHANGED = "RETURN TYPE CHANGED"
SIGNATURE_CHANGED = "SIGNATURE CHANGED"


def _params_span(signature: str) -> tuple[int, int] | None:
    """Index of the parameter list's opening and closing parentheses.

    The parameter list is the last top-level parenthesised group.
    """
    if not signature.endswith(")"):
        return None
    depth = 0
    for i in range(len(signature) - 1, -1, -1):
        ch = signature[i]
        if ch == ")":
            depth += 1
        elif ch == "(":
            depth -= 1
            if depth == 0:
                return i, len(signature) - 1
    return None


def extract_params(signature: str) -> list[str]:
    """Extract the parameter types from a signature string."""
    span = _params_span(signature)
    if span is None:
        return []
    params_str = signature[span[0] + 1 : span[1]]
    if not params_str.strip():
        return []

    # Split by comma respecting paren/bracket depth
    params: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in params_str:
        if ch in ("(", "["):
            depth += 1
        elif ch in (")", "]"):
            depth -= 1
        if ch == "," and depth == 0:
            params.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    last = "".join(current).strip()
    if last:
        params.append(last)
    return params


def extract_return_type(signature: str) -> str:
    """Extract the return type from a signature string."""
    span = _params_span(signature)
    if span is None:
        return signature.strip()
    return signature[: span[0]].strip()


def classify_signature_change(old_signature: str | None, new_signature: str | None) -> str:
    """Return a category label for a signature change.

    Returns one of:
        "PARAMETER REMOVED"
        "PARAMETER ADDED"
        "RETURN TYPE CHANGED"
        "PARAMETER TYPE CHANGED"
        "SIGNATURE CHANGED"
    """
    if old_signature is None or new_signature is None or old_signature == new_signature:
        return SIGNATURE_CHANGED

    old_params = extract_params(old_signature)
    new_params = extract_params(new_signature)

    if len(new_params) < len(old_params):
        return PARAMETER_REMOVED
    if len(new_params) > len(old_params):
        return PARAMETER_ADDED

    if extract_return_type(old_signature) != extract_return_type(new_signature):
        return RETURN_TYPE_CHANGED

    for old_p, new_p in zip(old_params, new_params, strict=True):
        if old_p != new_p:
            return PARAMETER_TYPE_CHANGED

    return SIGNATURE_CHANGED
