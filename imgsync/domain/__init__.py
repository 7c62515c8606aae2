"""
Domain layer for imgsync.

Contains pure domain objects with no I/O or side effects:
- Repository: A repository in a registry (target or source)
- SourceSpec / RunConfig: What to sync and how
- SyncSummary: Outcome of a sync run

These objects are immutable where possible and provide
serialization methods for JSONL output.
"""

from .repository import Auth, Repository, DEFAULT_REGISTRY
from .source import SourceSpec, RunConfig
from .result import SyncStatus, TagSyncDetail, SourceSyncResult, SyncSummary

__all__ = [
    'Auth',
    'Repository',
    'DEFAULT_REGISTRY',
    'SourceSpec',
    'RunConfig',
    'SyncStatus',
    'TagSyncDetail',
    'SourceSyncResult',
    'SyncSummary',
]
