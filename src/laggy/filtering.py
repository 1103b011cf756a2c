"""URL scoping for ``--include`` / ``--exclude`` patterns."""

from __future__ import annotations

import functools
import re
from collections.abc import Sequence


@functools.lru_cache(maxsize=256)
def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob-style *pattern* into a case-insensitive regex.

    ``*`` matches any run of characters, including none.  Every other
    character is literal.
    """
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(body, re.IGNORECASE | re.DOTALL)


def matches(target: str, pattern: str) -> bool:
    """Return True if *pattern* matches the whole of *target*."""
    return pattern_to_regex(pattern).fullmatch(target) is not None


def in_scope(
    target: str,
    include: Sequence[str],
    exclude: Sequence[str],
) -> bool:
    """Decide whether *target* should receive chaos treatment.

    An exclude match always wins.  With no include patterns every target is
    in scope; otherwise the target must match at least one of them.
    """
    if any(matches(target, pattern) for pattern in exclude):
        return False
    if not include:
        return True
    return any(matches(target, pattern) for pattern in include)


__all__ = ["in_scope", "matches", "pattern_to_regex"]
