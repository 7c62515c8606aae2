"""
Service layer for imgsync.

Contains the sync logic that works on domain objects and infrastructure:
- tag_matcher: Select the tags of a source to sync
- reconciler: Compare the selection with the target inventory
- SyncService: Drive the per-source, per-tag copy loop

Services are the primary API for commands to use.
"""

from .tag_matcher import filter_tags
from .reconciler import missing_tags, sync_set
from .sync_service import SyncService

__all__ = [
    'filter_tags',
    'missing_tags',
    'sync_set',
    'SyncService',
]
