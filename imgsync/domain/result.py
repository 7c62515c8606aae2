"""
Sync result domain objects for imgsync.

Provides standardized result types for a sync run: one detail per tag
copy attempt, one result per source, and a summary for the whole run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class SyncStatus(Enum):
    """Status of an individual tag copy or of a whole source."""
    SUCCESS = "success"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


@dataclass
class TagSyncDetail:
    """Outcome of copying one tag from a source to the target."""
    tag: str
    source_ref: str
    target_ref: str
    status: SyncStatus
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'tag': self.tag,
            'source': self.source_ref,
            'target': self.target_ref,
            'status': self.status.value,
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class SourceSyncResult:
    """
    What happened to one configured source during a run.

    Counts describe the selection pipeline: tags listed at the source,
    tags kept by the selectors, tags missing at the target and tags
    forced through `mutableTags`.
    """
    source_address: str
    target_address: Optional[str] = None
    status: SyncStatus = SyncStatus.SUCCESS
    listed: int = 0
    selected: int = 0
    missing: int = 0
    forced: int = 0
    error: Optional[str] = None
    details: List[TagSyncDetail] = field(default_factory=list)

    @property
    def copied(self) -> int:
        return sum(1 for d in self.details if d.status == SyncStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for d in self.details if d.status == SyncStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': 'source',
            'source': self.source_address,
            'target': self.target_address,
            'status': self.status.value,
            'listed': self.listed,
            'selected': self.selected,
            'missing': self.missing,
            'forced': self.forced,
            'copied': self.copied,
            'failed': self.failed,
            'tags': [d.to_dict() for d in self.details],
        }
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class SyncSummary:
    """
    Summary of a sync run across all configured sources.

    Errors recorded here were recovered under `continueOnSyncError`;
    unrecovered errors abort the run instead.
    """
    target_address: str
    sources: List[SourceSyncResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def sources_total(self) -> int:
        return len(self.sources)

    @property
    def sources_synced(self) -> int:
        return sum(1 for s in self.sources if s.status == SyncStatus.SUCCESS)

    @property
    def sources_up_to_date(self) -> int:
        return sum(1 for s in self.sources if s.status == SyncStatus.UP_TO_DATE)

    @property
    def sources_failed(self) -> int:
        return sum(1 for s in self.sources if s.status == SyncStatus.FAILED)

    @property
    def tags_copied(self) -> int:
        return sum(s.copied for s in self.sources)

    @property
    def tags_failed(self) -> int:
        return sum(s.failed for s in self.sources)

    @property
    def success(self) -> bool:
        """True if no recovered errors occurred."""
        return not self.errors

    def add_source(self, result: SourceSyncResult) -> None:
        self.sources.append(result)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'target': self.target_address,
            'sources_total': self.sources_total,
            'sources_synced': self.sources_synced,
            'sources_up_to_date': self.sources_up_to_date,
            'sources_failed': self.sources_failed,
            'tags_copied': self.tags_copied,
            'tags_failed': self.tags_failed,
            'success': self.success,
            'errors': self.errors,
        }
