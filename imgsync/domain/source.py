"""
Sync configuration domain objects for imgsync.

- SourceSpec: one source repository and the rules selecting its tags
- RunConfig: the target plus the ordered sources for one run

Both are immutable; a RunConfig is built once per run by `imgsync.config`.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .repository import Repository


@dataclass(frozen=True)
class SourceSpec:
    """
    A source repository with its tag selectors and filters.

    Attributes:
        source: Source repository
        tags: Explicit tags to sync when present at the source
        mutable_tags: Tags re-synced on every run (e.g., "latest")
        regex_tags: Patterns selecting tags, in configuration order
        latest_semver_sync: Also sync the highest semantic-version tag
        latest_semver_regex: Pattern overriding the default semver filter
        omit_pre_release_tags: Drop selected tags containing alpha/beta/rc
        omit_dashed_tags: Drop selected tags containing a dash
    """

    source: Repository
    tags: Tuple[str, ...] = ()
    mutable_tags: Tuple[str, ...] = ()
    regex_tags: Tuple[str, ...] = ()
    latest_semver_sync: bool = False
    latest_semver_regex: Optional[str] = None
    omit_pre_release_tags: bool = False
    omit_dashed_tags: bool = False

    def target_address(self, target: Repository) -> str:
        """Address on the target registry where this source is synced."""
        return target.child_address(self.source)


@dataclass(frozen=True)
class RunConfig:
    """Target, sources and error policy for a single sync run."""

    target: Repository
    sources: Tuple[SourceSpec, ...] = field(default_factory=tuple)
    continue_on_sync_error: bool = False
