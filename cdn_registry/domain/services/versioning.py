"""Semantic version helpers for channel selection."""
import re
from typing import Callable, Iterable, Optional, TypeVar

import semver

from cdn_registry.domain.entities.manifest import Channel

T = TypeVar("T")

_PREFIX_RE = re.compile(r"^[vV](?=\d)")


def strip_version_prefix(tag: str) -> str:
    """Strip a leading ``v``/``V`` from a release tag (``v1.2.0`` -> ``1.2.0``)."""
    return _PREFIX_RE.sub("", tag.strip())


def parse_version(tag: str) -> Optional[semver.Version]:
    """
    Parse a tag or version id as a SemVer 2.0 version.
    
    Major, minor and patch are all required; ``v4`` or ``1.2`` are not
    semantic versions.
    
    Returns:
        Parsed version, or None if the string is not a valid semantic version
    """
    try:
        return semver.Version.parse(strip_version_prefix(tag))
    except (ValueError, TypeError):
        return None


def is_prerelease(version: str) -> bool:
    """
    Check whether a version carries a pre-release component.
    
    Unparseable versions count as pre-release when they have a ``-`` suffix.
    """
    parsed = parse_version(version)
    if parsed is not None:
        return parsed.prerelease is not None
    return "-" in strip_version_prefix(version)


def detect_channel(version: str, override: Optional[Channel] = None) -> Channel:
    """Channel from the version itself; an explicit override takes precedence."""
    if override:
        return override
    return "beta" if is_prerelease(version) else "stable"


def alias_names(version: str) -> list[str]:
    """
    Get ``v<major>`` and ``v<major>.<minor>`` alias pointers for a stable version.
    
    Returns an empty list for invalid or pre-release versions.
    """
    parsed = parse_version(version)
    if parsed is None or parsed.prerelease is not None:
        return []
    return [f"v{parsed.major}", f"v{parsed.major}.{parsed.minor}"]


def highest(items: Iterable[T], tag_of: Callable[[T], str]) -> Optional[T]:
    """
    Pick the item with the highest valid version under semver precedence.
    
    Items with unparseable tags are ignored. Ties (including versions that
    differ only in build metadata) keep the first item in iteration order
    (hosts list newest first).
    """
    ranked = [(parse_version(tag_of(item)), item) for item in items]
    ranked = [(v, item) for v, item in ranked if v is not None]
    if not ranked:
        return None
    ranked.sort(key=lambda pair: pair[0], reverse=True)
    return ranked[0][1]
