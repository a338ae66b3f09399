"""Set differences over ordered string sequences.

Membership is exact string equality. Neither function sorts or
deduplicates its result; callers do that when they need a stable display
order.
"""

from collections.abc import Iterable, Sequence


def diff_symmetric(a: Sequence[str], b: Sequence[str]) -> list[str]:
    """Elements of a missing from b, followed by elements of b missing from a."""
    return diff_one_way(a, b) + diff_one_way(b, a)


def diff_one_way(a: Sequence[str], b: Sequence[str]) -> list[str]:
    """Elements of a missing from b, in the order they appear in a."""
    seen_in_b = set(b)
    return [x for x in a if x not in seen_in_b]


def unique(items: Iterable[str]) -> list[str]:
    """Drop repeated items, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))
