"""
Tag selection for imgsync sources.

Selects which tags of a source inventory should be synced. Selectors run
in a fixed order and append to a single list:

1. Explicit tags listed in `tags`
2. Tags matching any pattern in `regexTags`
3. The highest semantic version (`latestSemverSync`)

The special-tag filters (`omitPreReleaseTags`, `omitDashedTags`) then run
over the whole selection, so an explicitly listed tag can still be
dropped. Duplicates between selectors are kept.
"""

import logging
import re
from typing import List, Optional, Sequence

import semver

from ..domain.source import SourceSpec
from ..exit_codes import FilterError

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
DEFAULT_SEMVER_REGEX = (
    r'^(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)'
    r'(?:-((?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*)'
    r'(?:\.(?:0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*))*))?'
    r'(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$'
)

PRE_RELEASE_MARKERS = ("alpha", "beta", "rc")


def _compile(pattern: str, what: str) -> 're.Pattern[str]':
    try:
        return re.compile(pattern)
    except re.error as e:
        raise FilterError(f"Matching {what} \"{pattern}\": {e}") from e


def matching_tags(tags: Sequence[str], spec: SourceSpec) -> List[str]:
    """Tags of the inventory explicitly listed by the source, in inventory order."""
    wanted = set(spec.tags)
    return [t for t in tags if t != "" and t in wanted]


def matching_regex_tags(tags: Sequence[str], spec: SourceSpec) -> List[str]:
    """
    Tags matching at least one of the source's patterns.

    Patterns are searched, not anchored; a tag matching several patterns
    is only included once.

    Raises:
        FilterError: If any pattern is invalid
    """
    patterns = [_compile(p, "regex") for p in spec.regex_tags if p != ""]
    if not patterns:
        return []

    return [t for t in tags if t != "" and any(p.search(t) for p in patterns)]


def highest_semver(tags: Sequence[str]) -> Optional[str]:
    """
    Highest semantic version among `tags`, in canonical form.

    A leading `v` and short forms (`1`, `1.2`) are accepted. Returns None
    when there is nothing to compare.

    Raises:
        FilterError: If a tag cannot be parsed as a semantic version
    """
    best = None
    for tag in tags:
        if tag == "":
            continue
        try:
            version = semver.Version.parse(
                tag[1:] if tag.startswith("v") else tag,
                optional_minor_and_patch=True,
            )
        except (TypeError, ValueError) as e:
            raise FilterError(f"finding highest semver: parsing {tag!r}: {e}") from e

        # Among equal precedence the later tag wins
        if best is None or version >= best:
            best = version

    return None if best is None else str(best)


def latest_semver_tag(
    tags: Sequence[str],
    spec: SourceSpec,
    logger: Optional[logging.Logger] = None,
) -> Optional[str]:
    """
    The highest semantic-version tag, if the source asks for it.

    Candidates are the tags matching `latestSemverRegex`, or the default
    semver.org pattern when none is configured.
    """
    if not spec.latest_semver_sync:
        return None

    logger = logger or logging.getLogger(__name__)
    pattern = _compile(spec.latest_semver_regex or DEFAULT_SEMVER_REGEX, "semver regex")
    candidates = [t for t in tags if pattern.search(t)]
    logger.debug(f"{spec.source.address} : {len(candidates)} semver candidates")
    return highest_semver(candidates)


def filter_special_tags(tags: Sequence[str], spec: SourceSpec) -> List[str]:
    """Drop pre-release and/or dashed tags according to the source options."""
    if not spec.omit_pre_release_tags and not spec.omit_dashed_tags:
        return list(tags)

    filtered = []
    for tag in tags:
        if spec.omit_pre_release_tags and any(m in tag for m in PRE_RELEASE_MARKERS):
            continue
        # Dashed tags are usually arch variants or custom builds
        if spec.omit_dashed_tags and "-" in tag:
            continue
        filtered.append(tag)
    return filtered


def filter_tags(
    tags: Sequence[str],
    spec: SourceSpec,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Apply all selectors and filters of `spec` to a tag inventory.

    Args:
        tags: Tags listed at the source repository
        spec: Source configuration
        logger: Logger for selection decisions (module logger if None)

    Returns:
        Selected tags, grouped by selector (explicit, regex, semver)

    Raises:
        FilterError: On an invalid pattern or unparsable version. No
            partial selection is returned.
    """
    selected = matching_tags(tags, spec)
    selected.extend(matching_regex_tags(tags, spec))

    latest = latest_semver_tag(tags, spec, logger=logger)
    if latest is not None:
        selected.append(latest)

    return filter_special_tags(selected, spec)
