"""Type usage: which functions return or take each type.

A textual heuristic, not type resolution: a type is "used" by a function
when its name appears in the return type or argument line immediately
followed by a space, ``;``, ``)`` or ``*``. Coincidental substrings also
match.
"""

from __future__ import annotations

import bisect
import re

from capidoc.schema import Snapshot, TypeUsage

_BOUNDARY = r"[ ;\)\*]"


def type_pattern(type_name: str) -> re.Pattern[str]:
    """Regex matching *type_name* followed by a boundary character."""
    return re.compile(re.escape(type_name) + _BOUNDARY)


def resolve_type_usage(snapshot: Snapshot) -> None:
    """Fill ``used.returns`` and ``used.needs`` for every type in place."""
    patterns = {name: type_pattern(name) for name in snapshot.types}
    for t in snapshot.types.values():
        t.used = TypeUsage()

    for func_name, func in snapshot.functions.items():
        for type_name, t in snapshot.types.items():
            pattern = patterns[type_name]
            if pattern.search(func.returns.type):
                bisect.insort(t.used.returns, func_name)
            if pattern.search(func.argline):
                bisect.insort(t.used.needs, func_name)
