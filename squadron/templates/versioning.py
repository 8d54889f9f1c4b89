"""Version label parsing and ordering.

Template versions are labels like "v1.0", "v2.3.1" or "1.4". A leading
"v" is ignored and dotted numeric parts are compared numerically, so
"v1.10" is newer than "v1.9". Labels that do not start with a number fall
back to plain string comparison.
"""

import re

_VERSION_PATTERN = re.compile(r"^[vV]?(\d+(?:\.\d+)*)(.*)$")


def parse_version(version: str) -> tuple[tuple[int, ...], str] | None:
    """Split a version label into numeric parts and a suffix.

    Trailing zero parts are dropped so "v1" and "v1.0.0" are equal.

    Returns:
        (numeric parts, suffix), or None if the label is not numeric
    """
    match = _VERSION_PATTERN.match(version.strip())
    if match is None:
        return None

    parts = [int(part) for part in match.group(1).split(".")]
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts), match.group(2).strip()


def compare_versions(left: str, right: str) -> int:
    """Compare two version labels.

    A pre-release style suffix ("v2.0-beta") sorts before the bare
    version ("v2.0").

    Returns:
        -1 if left is older, 0 if equal, 1 if left is newer
    """
    parsed_left = parse_version(left)
    parsed_right = parse_version(right)

    if parsed_left is None or parsed_right is None:
        return (left > right) - (left < right)

    left_parts, left_suffix = parsed_left
    right_parts, right_suffix = parsed_right

    if left_parts != right_parts:
        return 1 if left_parts > right_parts else -1

    if left_suffix == right_suffix:
        return 0
    if not left_suffix:
        return 1
    if not right_suffix:
        return -1
    return 1 if left_suffix > right_suffix else -1


def is_newer(candidate: str, baseline: str) -> bool:
    """True if candidate is strictly newer than baseline."""
    return compare_versions(candidate, baseline) > 0


def same_version(left: str | None, right: str | None) -> bool:
    """True if both labels are set and denote the same version."""
    if left is None or right is None:
        return False
    return compare_versions(left, right) == 0
