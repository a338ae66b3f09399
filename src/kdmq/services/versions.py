"""Semver helpers for Rancher and Kubernetes version strings.

Kubernetes versions in KDM look like "v1.24.10-rancher1-1": the leading "v"
is stripped and the rest is strict semver, so "-rancher1-1" is a
pre-release and sorts before "1.24.10".

Range expressions use the comparator syntax found in K8sVersionedTemplates:

    ">=1.21.0-rancher1-1 <1.24.0"     (space = AND)
    "<1.16.0 || >=1.20.0"             (|| = OR)
"""

import re
from collections.abc import Callable

import semver

from kdmq.errors import InvalidVersionError

VersionRange = Callable[[semver.Version], bool]

# Longest operators first so ">=" is not read as ">".
_OPERATORS = (">=", "<=", "!=", "==", ">", "<", "=", "!")
# Spellings semver.Version.match does not accept.
_MATCH_ALIASES = {"": "==", "=": "==", "!": "!="}

_RUNS = re.compile(r"\d+|\D+")


def strip_v(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def parse_semver(version: str) -> semver.Version:
    """Parse MAJOR.MINOR.PATCH[-pre][+build] with an optional leading "v"."""
    try:
        return semver.Version.parse(strip_v(version))
    except (ValueError, TypeError) as e:
        raise InvalidVersionError(f"Not a valid semver version: [{version}], error [{e}]") from e


def parse_loose(version: str) -> semver.Version:
    """Parse a release version that may omit minor or patch ("2.6" -> 2.6.0)."""
    try:
        return semver.Version.parse(strip_v(version), optional_minor_and_patch=True)
    except (ValueError, TypeError) as e:
        raise InvalidVersionError(f"Not a valid version: [{version}], error [{e}]") from e


def compare_loose(a: str, b: str) -> int:
    """Compare two release versions, returning -1, 0 or 1."""
    return parse_loose(a).compare(parse_loose(b))


def k8s_version_key(version: str) -> tuple:
    """Sort key for Kubernetes versions with numbered pre-release tags.

    The pre-release is split into digit and non-digit runs and digit runs
    compare as numbers, so "v1.24.10-rancher1-10" sorts above
    "v1.24.10-rancher1-2". A version without a pre-release sorts last.
    """
    parsed = parse_semver(version)
    prerelease = parsed.prerelease or ""
    runs = tuple(
        (0, int(run), "") if run.isdigit() else (1, 0, run) for run in _RUNS.findall(prerelease)
    )
    return parsed.major, parsed.minor, parsed.patch, not prerelease, runs


def major_minor_tag(tag: str) -> str:
    """v1.24.10-rancher1-1 -> v1.24; empty string when there is no minor part."""
    parts = tag.split(".")
    if len(parts) < 2:
        return ""
    return ".".join(parts[:2])


def parse_range(expression: str) -> VersionRange:
    """Build a predicate from a range expression.

    Raises InvalidVersionError when a comparator does not hold a valid
    semver version or the expression is empty.
    """
    alternatives = []
    for alternative in expression.split("||"):
        tokens = _join_detached_operators(alternative.split())
        if not tokens:
            raise InvalidVersionError(f"Empty version range in [{expression}]")
        alternatives.append([_parse_comparator(token, expression) for token in tokens])

    def _matches(version: semver.Version) -> bool:
        return any(all(version.match(expr) for expr in comparators) for comparators in alternatives)

    return _matches


def version_in_range(version: str, expression: str) -> bool:
    return parse_range(expression)(parse_semver(version))


def _join_detached_operators(tokens: list[str]) -> list[str]:
    # ">= 1.2.3" is written as two tokens
    joined: list[str] = []
    for token in tokens:
        if joined and joined[-1] in _OPERATORS:
            joined[-1] += token
        else:
            joined.append(token)
    return joined


def _parse_comparator(token: str, expression: str) -> str:
    """Normalize one comparator to a semver.Version.match expression."""
    op = next((o for o in _OPERATORS if token.startswith(o)), "")
    raw = token[len(op):]
    try:
        semver.Version.parse(raw)
    except ValueError as e:
        raise InvalidVersionError(
            f"Not a valid version range [{expression}]: [{raw}] is not semver"
        ) from e
    return _MATCH_ALIASES.get(op, op) + raw
