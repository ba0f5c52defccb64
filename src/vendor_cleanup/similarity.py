"""Deterministic difference scoring between two normalized texts."""

from __future__ import annotations

from difflib import SequenceMatcher


def common_characters(a: str, b: str) -> int:
    """Return the number of characters shared by ``a`` and ``b``.

    The longest common substring is counted first, then the pieces left and
    right of it are matched the same way. Among equally long substrings the
    one starting earliest in ``a`` (then in ``b``) is taken, so the result is
    stable for a given argument order.
    """

    if not a or not b:
        return 0

    matcher = SequenceMatcher(None, a, b, autojunk=False)
    total = 0
    pending = [(0, len(a), 0, len(b))]
    while pending:
        a_lo, a_hi, b_lo, b_hi = pending.pop()
        match = matcher.find_longest_match(a_lo, a_hi, b_lo, b_hi)
        if match.size == 0:
            continue
        total += match.size
        if match.a > a_lo and match.b > b_lo:
            pending.append((a_lo, match.a, b_lo, match.b))
        if match.a + match.size < a_hi and match.b + match.size < b_hi:
            pending.append((match.a + match.size, a_hi, match.b + match.size, b_hi))
    return total


def similarity(a: str, b: str) -> float:
    """Return the similarity of ``a`` and ``b`` as a percentage."""

    if a == b:
        return 100.0
    return common_characters(a, b) * 2 * 100 / (len(a) + len(b))


def diff_percentage(a: str, b: str) -> float:
    """Return ``100 - similarity`` rounded to one decimal place."""

    if a == b:
        return 0.0
    return round(100 - similarity(a, b), 1)
